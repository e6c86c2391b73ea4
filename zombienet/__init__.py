"""
zombienet - ephemeral test networks on podman or kubernetes

Spawns a multi-node network from a config file, keeps it alive until the
process is told to stop, and always tears it down on the way out.
"""

__version__ = "1.2.0"

"""
Error types raised by the zombienet CLI and its collaborators.
"""

from typing import Optional


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ZombienetError(Exception):
    """Base exception for zombienet errors"""
    pass


class ConfigNotFoundError(ZombienetError):
    """Network config file does not exist"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Config file does not exist: {path}")


class ConfigInvalidError(ZombienetError):
    """Network config could not be read or failed validation"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid network config {path}: {reason}")


class CredsNotFoundError(ZombienetError):
    """Credentials file for the cluster provider could not be found"""

    def __init__(self, name: Optional[str]):
        self.name = name
        super().__init__(f"I can't find the Creds file: {name}")


class EngineStartError(ZombienetError):
    """Orchestration engine failed to bring the network up"""
    pass


class TeardownError(ZombienetError):
    """Stopping a session (or uploading its logs) failed"""

    def __init__(self, namespace: str, cause: BaseException):
        self.namespace = namespace
        self.cause = cause
        super().__init__(f"Teardown of namespace {namespace} failed: {cause!r}")


class SessionAlreadyActiveError(ZombienetError):
    """A second session was registered while one is still active"""
    pass


class ProviderCommandError(ZombienetError):
    """A provider CLI command exited with a non-zero status"""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command {' '.join(command)!r} failed with exit code {returncode}"
        if stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)


class TestFileError(ZombienetError):
    """Test file is missing or contains a line that can't be parsed"""
    __test__ = False

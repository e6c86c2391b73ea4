"""
Kubernetes provider: drives a cluster through kubectl.
"""

import logging
from typing import Any, Optional

import yaml

from ..config import NodeConfig
from .base import ProviderClient

logger = logging.getLogger(__name__)

CLEANER_NAME = "zombie-cleaner"
CLEANER_IMAGE = "docker.io/bitnami/kubectl:latest"


class KubernetesClient(ProviderClient):
    """
    Provider client backed by kubectl.

    Each network lives in its own namespace; nodes are bare pods.
    """

    binary = "kubectl"

    def __init__(self, creds: Optional[str] = None):
        self.creds = creds or None

    def name(self) -> str:
        return "kubernetes"

    def base_command(self) -> list[str]:
        command = [self.binary]
        if self.creds:
            command += ["--kubeconfig", self.creds]
        return command

    async def create_namespace(self, namespace: str) -> None:
        await self.run("create", "namespace", namespace)
        logger.info(f"Created namespace {namespace}")

    async def destroy_namespace(self, namespace: str) -> None:
        await self.run("delete", "namespace", namespace, "--wait=false", "--ignore-not-found")
        logger.info(f"Deleted namespace {namespace}")

    async def schedule_teardown(self, namespace: str, timeout: int) -> None:
        """
        Deploy a cleaner Job that deletes the namespace after `timeout` seconds.

        The Job's service account may delete only this namespace. Its cluster
        role and binding are owned by the namespace, so they are garbage
        collected along with it.
        """
        uid = await self.run("get", "namespace", namespace, "-o", "jsonpath={.metadata.uid}")
        manifests = cleaner_manifests(namespace, uid.stdout.strip(), timeout)
        await self.run("apply", "-f", "-", stdin=yaml.safe_dump_all(manifests, sort_keys=False))
        logger.info(f"Scheduled teardown of {namespace} in {timeout}s")

    async def spawn_node(self, namespace: str, node: NodeConfig, image: str) -> None:
        args = ["run", node.name, f"--image={image}", "--restart=Never", "-n", namespace]
        if node.command:
            args += ["--command", "--", node.command, *node.args]
        elif node.args:
            args += ["--", *node.args]
        await self.run(*args)

    async def node_logs(self, namespace: str, node_name: str) -> str:
        result = await self.run("logs", node_name, "-n", namespace)
        return result.stdout

    async def is_node_running(self, namespace: str, node_name: str) -> bool:
        result = await self.run(
            "get", "pod", node_name, "-n", namespace,
            "-o", "jsonpath={.status.phase}",
            check=False,
        )
        return result.ok and result.stdout.strip() == "Running"


def cleaner_manifests(namespace: str, namespace_uid: str, timeout: int) -> list[dict[str, Any]]:
    """Manifests for the Job that deletes `namespace` once `timeout` elapses."""
    owner = [{
        "apiVersion": "v1",
        "kind": "Namespace",
        "name": namespace,
        "uid": namespace_uid,
    }]
    cluster_name = f"{namespace}-cleaner"

    return [
        {
            "apiVersion": "v1",
            "kind": "ServiceAccount",
            "metadata": {"name": CLEANER_NAME, "namespace": namespace},
        },
        {
            "apiVersion": "rbac.authorization.k8s.io/v1",
            "kind": "ClusterRole",
            "metadata": {"name": cluster_name, "ownerReferences": owner},
            "rules": [{
                "apiGroups": [""],
                "resources": ["namespaces"],
                "resourceNames": [namespace],
                "verbs": ["get", "delete"],
            }],
        },
        {
            "apiVersion": "rbac.authorization.k8s.io/v1",
            "kind": "ClusterRoleBinding",
            "metadata": {"name": cluster_name, "ownerReferences": owner},
            "roleRef": {
                "apiGroup": "rbac.authorization.k8s.io",
                "kind": "ClusterRole",
                "name": cluster_name,
            },
            "subjects": [{"kind": "ServiceAccount", "name": CLEANER_NAME, "namespace": namespace}],
        },
        {
            "apiVersion": "batch/v1",
            "kind": "Job",
            "metadata": {"name": CLEANER_NAME, "namespace": namespace},
            "spec": {
                "backoffLimit": 3,
                "template": {
                    "spec": {
                        "serviceAccountName": CLEANER_NAME,
                        "restartPolicy": "OnFailure",
                        "containers": [{
                            "name": "cleaner",
                            "image": CLEANER_IMAGE,
                            "command": [
                                "sh", "-c",
                                f"sleep {timeout} && kubectl delete namespace {namespace} --wait=false",
                            ],
                        }],
                    },
                },
            },
        },
    ]

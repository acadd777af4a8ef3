"""
Builds authenticated Kubernetes clients from a kubeconfig path.

Every public operation in this package resolves its own connection so that
nothing is cached between calls. Callers that issue many calls may build a
ClusterConnection once and hand it to the watcher/locator/exec classes.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from kubernetes import client, config
from kubernetes.config import ConfigException

from .errors import KubeConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusterConnection:
    """Typed API handles that share one authenticated ApiClient."""

    api_client: client.ApiClient
    core_v1: client.CoreV1Api
    apps_v1: client.AppsV1Api

    @classmethod
    def from_api_client(cls, api_client: client.ApiClient) -> "ClusterConnection":
        return cls(
            api_client=api_client,
            core_v1=client.CoreV1Api(api_client),
            apps_v1=client.AppsV1Api(api_client),
        )


def get_rest_config(kubeconfig_path: Optional[str]) -> client.Configuration:
    """Load the REST transport configuration described by a kubeconfig file."""
    rest_config = client.Configuration()
    try:
        config.load_kube_config(
            config_file=kubeconfig_path, client_configuration=rest_config
        )
    except (ConfigException, FileNotFoundError) as e:
        logger.error(f"Could not load kubeconfig '{kubeconfig_path}': {e}")
        raise KubeConfigError(
            f"Could not load kubeconfig '{kubeconfig_path}': {e}"
        ) from e
    return rest_config


def get_client(kubeconfig_path: Optional[str]) -> ClusterConnection:
    """Return typed clients for the cluster described by a kubeconfig file."""
    rest_config = get_rest_config(kubeconfig_path)
    return ClusterConnection.from_api_client(client.ApiClient(rest_config))

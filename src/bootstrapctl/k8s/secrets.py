"""Read and create the Secrets that provisioning steps exchange bootstrap tokens through."""
import base64
import logging
from typing import Dict, Optional

from kubernetes import client

from .client import get_client

logger = logging.getLogger(__name__)


def read_secret(kubeconfig_path: Optional[str], namespace: str, name: str) -> Dict[str, str]:
    """
    Return the decoded data of a Secret.

    A missing Secret yields an empty mapping so callers can treat "not yet
    created" as "no values". Any other API error propagates.
    """
    core_v1 = get_client(kubeconfig_path).core_v1
    try:
        secret = core_v1.read_namespaced_secret(name=name, namespace=namespace)
    except client.ApiException as e:
        if e.status == 404:
            logger.warning(f"Secret '{name}' not found in namespace '{namespace}'.")
            return {}
        raise

    return {
        key: base64.b64decode(value).decode("utf-8")
        for key, value in (secret.data or {}).items()
    }


def create_secret(kubeconfig_path: Optional[str], secret: client.V1Secret) -> None:
    """Create ``secret`` in the namespace named by its metadata."""
    core_v1 = get_client(kubeconfig_path).core_v1
    core_v1.create_namespaced_secret(namespace=secret.metadata.namespace, body=secret)
    logger.info(
        f"Created Secret {secret.metadata.name} in Namespace {secret.metadata.namespace}"
    )

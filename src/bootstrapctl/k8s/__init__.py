"""
Kubernetes readiness and remote-execution helpers used by provisioning steps.
"""
from .client import ClusterConnection, get_client, get_rest_config
from .exec import ExecState, PodExecSession, PodSessionOptions, pod_exec_session
from .kinds import ResourceKind
from .locator import (
    ResourceLocator,
    return_deployment_object,
    return_pod_object,
    return_statefulset_object,
)
from .secrets import create_secret, read_secret
from .watcher import (
    ReadinessWatcher,
    WaitOutcome,
    WaitState,
    wait_for_deployment_ready,
    wait_for_pod_ready,
    wait_for_statefulset_ready,
)

__all__ = [
    "ClusterConnection",
    "get_client",
    "get_rest_config",
    "ExecState",
    "PodExecSession",
    "PodSessionOptions",
    "pod_exec_session",
    "ResourceKind",
    "ResourceLocator",
    "return_deployment_object",
    "return_pod_object",
    "return_statefulset_object",
    "create_secret",
    "read_secret",
    "ReadinessWatcher",
    "WaitOutcome",
    "WaitState",
    "wait_for_deployment_ready",
    "wait_for_pod_ready",
    "wait_for_statefulset_ready",
]

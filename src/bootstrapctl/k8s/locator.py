"""Finds an object by label before its name is known."""
import logging
import threading
from typing import Any, Optional

from .client import get_client
from .kinds import ResourceKind
from .watcher import DEFAULT_PACING_INTERVAL, ReadinessWatcher, WaitOutcome, WaitState

logger = logging.getLogger(__name__)


class ResourceLocator(ReadinessWatcher):
    """
    Watches a label selector until a matching object exists.

    Existence is weaker than readiness: a Pod only has to be Pending or
    Running, and a Deployment or StatefulSet only needs a non-zero replica
    count. When several objects match, the first one observed wins.
    """

    def find_object(
        self,
        kind: ResourceKind,
        label_key: str,
        label_value: str,
        namespace: str,
        timeout_seconds: float,
        cancel: Optional[threading.Event] = None,
    ) -> WaitOutcome:
        label_selector = f"{label_key}={label_value}"
        logger.info(f"Waiting for {label_value} {kind.value} to be created.")

        outcome = self._watch_until(
            kind,
            namespace,
            kind.predicate.exists,
            timeout_seconds,
            cancel,
            target=label_selector,
            label_selector=label_selector,
        )
        if not outcome.ready:
            return outcome

        # Several objects may carry the label; return the one that matched.
        found = self._relisted(
            kind,
            namespace,
            target=label_selector,
            name=outcome.object.metadata.name,
            label_selector=label_selector,
        )
        logger.info(f"Found {kind.value} {found.metadata.name} for {label_selector}.")
        return WaitOutcome(WaitState.READY, found)


def _find(
    kubeconfig_path: Optional[str],
    kind: ResourceKind,
    label_key: str,
    label_value: str,
    namespace: str,
    timeout_seconds: float,
    cancel: Optional[threading.Event] = None,
    pacing_interval: float = DEFAULT_PACING_INTERVAL,
) -> Any:
    locator = ResourceLocator(get_client(kubeconfig_path), pacing_interval=pacing_interval)
    outcome = locator.find_object(
        kind, label_key, label_value, namespace, timeout_seconds, cancel=cancel
    )
    return outcome.unwrap(kind, f"{label_key}={label_value}", timeout_seconds)


def return_deployment_object(
    kubeconfig_path: Optional[str],
    label_key: str,
    label_value: str,
    namespace: str,
    timeout_seconds: float,
    cancel: Optional[threading.Event] = None,
    pacing_interval: float = DEFAULT_PACING_INTERVAL,
) -> Any:
    """Return the first Deployment matching ``label_key=label_value`` once it has replicas."""
    return _find(
        kubeconfig_path,
        ResourceKind.DEPLOYMENT,
        label_key,
        label_value,
        namespace,
        timeout_seconds,
        cancel=cancel,
        pacing_interval=pacing_interval,
    )


def return_statefulset_object(
    kubeconfig_path: Optional[str],
    label_key: str,
    label_value: str,
    namespace: str,
    timeout_seconds: float,
    cancel: Optional[threading.Event] = None,
    pacing_interval: float = DEFAULT_PACING_INTERVAL,
) -> Any:
    """Return the first StatefulSet matching ``label_key=label_value`` once it has replicas."""
    return _find(
        kubeconfig_path,
        ResourceKind.STATEFUL_SET,
        label_key,
        label_value,
        namespace,
        timeout_seconds,
        cancel=cancel,
        pacing_interval=pacing_interval,
    )


def return_pod_object(
    kubeconfig_path: Optional[str],
    label_key: str,
    label_value: str,
    namespace: str,
    timeout_seconds: float,
    cancel: Optional[threading.Event] = None,
    pacing_interval: float = DEFAULT_PACING_INTERVAL,
) -> Any:
    """Return the first Pod matching ``label_key=label_value`` once it is Pending or Running."""
    return _find(
        kubeconfig_path,
        ResourceKind.POD,
        label_key,
        label_value,
        namespace,
        timeout_seconds,
        cancel=cancel,
        pacing_interval=pacing_interval,
    )

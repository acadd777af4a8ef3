"""
Resource kinds understood by the watcher and their readiness predicates.

Each kind owns one predicate object. The watcher never assumes the type of a
watch payload: ``ReadinessPredicate.coerce`` checks it against the kind's model
class and raises ObjectDecodeError for anything else.
"""
import abc
import enum
from typing import Any, Callable, Dict, Optional

from kubernetes import client

from .client import ClusterConnection
from .errors import ObjectDecodeError

POD_PENDING = "Pending"
POD_RUNNING = "Running"


class ResourceKind(enum.Enum):
    DEPLOYMENT = "Deployment"
    STATEFUL_SET = "StatefulSet"
    POD = "Pod"

    def list_function(self, connection: ClusterConnection) -> Callable[..., Any]:
        """Return the namespaced list call used for both watching and listing."""
        if self is ResourceKind.DEPLOYMENT:
            return connection.apps_v1.list_namespaced_deployment
        if self is ResourceKind.STATEFUL_SET:
            return connection.apps_v1.list_namespaced_stateful_set
        return connection.core_v1.list_namespaced_pod

    @property
    def predicate(self) -> "ReadinessPredicate":
        return _PREDICATES[self]


def _count(value: Optional[int]) -> int:
    # The API server omits zero-valued replica counters.
    return value or 0


class ReadinessPredicate(abc.ABC):
    """Decides whether an observed object is ready, or merely exists."""

    kind: ResourceKind
    model: type

    def coerce(self, obj: Any) -> Any:
        if not isinstance(obj, self.model):
            raise ObjectDecodeError(
                f"Expected a {self.kind.value} in the watch stream, "
                f"got {type(obj).__name__}."
            )
        return obj

    def threshold(self, obj: Any) -> Optional[int]:
        """Snapshot the configured replica count from the object passed in."""
        return None

    @abc.abstractmethod
    def is_ready(self, obj: Any, threshold: Optional[int], ignore_ready: bool = False) -> bool:
        ...

    @abc.abstractmethod
    def exists(self, obj: Any) -> bool:
        ...


class DeploymentPredicate(ReadinessPredicate):
    kind = ResourceKind.DEPLOYMENT
    model = client.V1Deployment

    def threshold(self, obj: client.V1Deployment) -> Optional[int]:
        return _count(obj.status.replicas if obj.status else None)

    def is_ready(self, obj: client.V1Deployment, threshold: Optional[int], ignore_ready: bool = False) -> bool:
        status = obj.status
        if status is None:
            return False
        return _count(status.ready_replicas) == threshold

    def exists(self, obj: client.V1Deployment) -> bool:
        return obj.status is not None and _count(obj.status.replicas) > 0


class StatefulSetPredicate(ReadinessPredicate):
    kind = ResourceKind.STATEFUL_SET
    model = client.V1StatefulSet

    def threshold(self, obj: client.V1StatefulSet) -> Optional[int]:
        return _count(obj.status.replicas if obj.status else None)

    def is_ready(self, obj: client.V1StatefulSet, threshold: Optional[int], ignore_ready: bool = False) -> bool:
        status = obj.status
        if status is None:
            return False
        if ignore_ready:
            # Pods only need to have been created, not to pass readiness.
            return _count(status.current_replicas) == threshold
        return _count(status.ready_replicas) == threshold

    def exists(self, obj: client.V1StatefulSet) -> bool:
        return obj.status is not None and _count(obj.status.replicas) > 0


class PodPredicate(ReadinessPredicate):
    kind = ResourceKind.POD
    model = client.V1Pod

    def is_ready(self, obj: client.V1Pod, threshold: Optional[int], ignore_ready: bool = False) -> bool:
        return obj.status is not None and obj.status.phase == POD_RUNNING

    def exists(self, obj: client.V1Pod) -> bool:
        return obj.status is not None and obj.status.phase in (POD_PENDING, POD_RUNNING)


_PREDICATES: Dict[ResourceKind, ReadinessPredicate] = {
    ResourceKind.DEPLOYMENT: DeploymentPredicate(),
    ResourceKind.STATEFUL_SET: StatefulSetPredicate(),
    ResourceKind.POD: PodPredicate(),
}

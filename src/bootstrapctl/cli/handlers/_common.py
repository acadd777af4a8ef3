from typing import Dict

from ...k8s.kinds import ResourceKind

KIND_NAMES: Dict[str, ResourceKind] = {
    "deployment": ResourceKind.DEPLOYMENT,
    "statefulset": ResourceKind.STATEFUL_SET,
    "pod": ResourceKind.POD,
}

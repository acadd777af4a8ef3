import threading
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from kubernetes import client

NAMESPACE = "argocd"


def _selector_and_template(name: str) -> Tuple[client.V1LabelSelector, client.V1PodTemplateSpec]:
    labels = {"app": name}
    return (
        client.V1LabelSelector(match_labels=labels),
        client.V1PodTemplateSpec(
            metadata=client.V1ObjectMeta(labels=labels),
            spec=client.V1PodSpec(containers=[client.V1Container(name=name)]),
        ),
    )


def make_deployment(
    name: str = "argocd-server",
    namespace: str = NAMESPACE,
    replicas: Optional[int] = 3,
    ready_replicas: Optional[int] = None,
    labels: Optional[Dict[str, str]] = None,
) -> client.V1Deployment:
    selector, template = _selector_and_template(name)
    return client.V1Deployment(
        metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels=labels),
        spec=client.V1DeploymentSpec(replicas=replicas, selector=selector, template=template),
        status=client.V1DeploymentStatus(replicas=replicas, ready_replicas=ready_replicas),
    )


def make_statefulset(
    name: str = "vault",
    namespace: str = "vault",
    replicas: int = 3,
    ready_replicas: Optional[int] = None,
    current_replicas: Optional[int] = None,
) -> client.V1StatefulSet:
    selector, template = _selector_and_template(name)
    return client.V1StatefulSet(
        metadata=client.V1ObjectMeta(name=name, namespace=namespace),
        spec=client.V1StatefulSetSpec(
            replicas=replicas,
            selector=selector,
            service_name=f"{name}-internal",
            template=template,
        ),
        status=client.V1StatefulSetStatus(
            replicas=replicas,
            ready_replicas=ready_replicas,
            current_replicas=current_replicas,
        ),
    )


def make_pod(
    name: str = "vault-0", namespace: str = "vault", phase: Optional[str] = "Pending"
) -> client.V1Pod:
    return client.V1Pod(
        metadata=client.V1ObjectMeta(name=name, namespace=namespace),
        spec=client.V1PodSpec(containers=[client.V1Container(name="main")]),
        status=client.V1PodStatus(phase=phase),
    )


def event(obj: Any, event_type: str = "MODIFIED") -> Dict[str, Any]:
    """Build a watch event the way kubernetes.watch.Watch yields them."""
    return {"type": event_type, "object": obj, "raw_object": {}}


class FakeWatch:
    """
    Stands in for kubernetes.watch.Watch.

    Yields the given events, then either ends the stream (``hold_open=False``),
    raises ``error``, or blocks until ``stop()`` like a quiet live watch.
    """

    def __init__(
        self,
        events: Iterable[Dict[str, Any]] = (),
        hold_open: bool = True,
        error: Optional[BaseException] = None,
    ) -> None:
        self.events = list(events)
        self.hold_open = hold_open
        self.error = error
        self.calls: List[Tuple[Any, Dict[str, Any]]] = []
        self.stopped = threading.Event()

    def stream(self, func, **kwargs):
        self.calls.append((func, kwargs))
        for e in self.events:
            if self.stopped.is_set():
                return
            yield e
        if self.error is not None:
            raise self.error
        if self.hold_open:
            self.stopped.wait(10)

    def stop(self) -> None:
        self.stopped.set()

    @property
    def kwargs(self) -> Dict[str, Any]:
        return self.calls[0][1]


class FakeExecStream:
    """
    Stands in for the WSClient returned by kubernetes.stream.stream.

    ``frames`` is a list of ("stdout" | "stderr", data) tuples delivered one
    per ``update()`` call. ``sock_fd`` is what the relay selects on in place
    of the websocket.
    """

    def __init__(
        self,
        frames: Iterable[Tuple[str, str]] = (),
        returncode: Optional[int] = 0,
        fail_on_update: Optional[BaseException] = None,
        sock_fd: Optional[int] = None,
    ) -> None:
        self._frames = list(frames)
        self.sock = SimpleNamespace(sock=sock_fd)
        self.update_timeouts: List[Any] = []
        self._pending: Optional[Tuple[str, str]] = None
        self.returncode = returncode
        self.fail_on_update = fail_on_update
        self.stdin_writes: List[Any] = []
        self.close_count = 0

    def is_open(self) -> bool:
        return self.close_count == 0 and (bool(self._frames) or self.fail_on_update is not None)

    def update(self, timeout=None) -> None:
        self.update_timeouts.append(timeout)
        if self.fail_on_update is not None:
            raise self.fail_on_update
        self._pending = self._frames.pop(0)

    def _peek(self, channel: str) -> bool:
        return self._pending is not None and self._pending[0] == channel

    def peek_stdout(self) -> bool:
        return self._peek("stdout")

    def peek_stderr(self) -> bool:
        return self._peek("stderr")

    def _read(self) -> str:
        assert self._pending is not None
        data = self._pending[1]
        self._pending = None
        return data

    def read_stdout(self) -> str:
        return self._read()

    def read_stderr(self) -> str:
        return self._read()

    def write_stdin(self, data: Any) -> None:
        self.stdin_writes.append(data)

    def close(self) -> None:
        self.close_count += 1


class BlockingWatchResponse:
    """
    Stands in for the urllib3 response behind a real kubernetes Watch.

    ``stream()`` blocks like a quiet watch until the response is shut down
    or closed from another thread.
    """

    def __init__(self) -> None:
        self.released = threading.Event()
        self.closed = False

    def stream(self, amt=None, decode_content=None):
        self.released.wait(10)
        yield from ()

    def shutdown(self) -> None:
        self.released.set()

    def close(self) -> None:
        self.closed = True
        self.released.set()

    def release_conn(self) -> None:
        pass


def list_function_returning(response: Any):
    def list_namespaced_deployment(namespace, **kwargs):
        """
        list or watch objects of kind Deployment

        :return: V1DeploymentList
        """
        return response

    return list_namespaced_deployment

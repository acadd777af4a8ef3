"""
Watches a single Kubernetes object until it satisfies its readiness predicate.

A wait call owns exactly one watch stream. The stream is consumed on a daemon
thread that forwards events into a queue, and the calling thread races the
next queued event against one absolute deadline taken at call entry:

    caller thread                       watch thread
    -------------                       ------------
    deadline = now + timeout            for event in Watch().stream(...):
    loop:                                   queue.put(event)
        queue.get(timeout=remaining)    queue.put(closed | failed)
        evaluate predicate
        pace

Whichever comes first, a satisfying event or the deadline, decides the
outcome. A stream that ends on its own is terminal for the call and is never
reconnected.
"""
import enum
import functools
import logging
import math
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Tuple

from kubernetes import watch

from .client import ClusterConnection, get_client
from .errors import (
    ObjectNotFoundError,
    WaitCancelledError,
    WaitTimeoutError,
    WatchClosedError,
    WatchSetupError,
)
from .kinds import ResourceKind

logger = logging.getLogger(__name__)

DEFAULT_PACING_INTERVAL = 1.0
# How often a cancellable wait wakes up to check its cancel event.
CANCEL_POLL_INTERVAL = 0.25
# Extra server-side watch lifetime past the local deadline, so the local
# deadline always fires first and the server eventually reaps the stream.
WATCH_GRACE_SECONDS = 5
# Upper bound on waiting for the watch thread once its response is shut down.
STREAM_JOIN_TIMEOUT = 2.0

_EVENT = "event"
_CLOSED = "closed"
_FAILED = "failed"


class WaitState(enum.Enum):
    READY = "Ready"
    TIMED_OUT = "TimedOut"
    WATCH_CLOSED = "WatchClosed"


@dataclass(frozen=True)
class WaitOutcome:
    state: WaitState
    object: Any = None

    @property
    def ready(self) -> bool:
        return self.state is WaitState.READY

    def unwrap(self, kind: ResourceKind, target: str, timeout_seconds: float) -> Any:
        """Return the ready object, or raise the error matching the outcome."""
        if self.state is WaitState.READY:
            return self.object
        if self.state is WaitState.TIMED_OUT:
            raise WaitTimeoutError(kind.value, target, timeout_seconds)
        raise WatchClosedError(
            f"Watch for {kind.value} '{target}' closed before the condition was met."
        )


class _WatchStream:
    """
    Runs one watch on a daemon thread and hands its events over a queue.

    The HTTP response behind the watch is captured so ``stop()`` can shut it
    down; ``Watch.stop()`` alone is only noticed after the next event.
    """

    def __init__(self, w: watch.Watch, list_fn: Callable[..., Any], **kwargs: Any) -> None:
        self._watch = w
        self._events: "queue.Queue[Tuple[str, Any]]" = queue.Queue()
        self._response: Any = None
        self.received = 0

        # Watch reads the return type from the list function's docstring.
        @functools.wraps(list_fn)
        def _list_and_capture(*args: Any, **list_kwargs: Any) -> Any:
            self._response = list_fn(*args, **list_kwargs)
            return self._response

        self._thread = threading.Thread(
            target=self._pump, args=(_list_and_capture, kwargs), daemon=True
        )

    def _pump(self, list_fn: Callable[..., Any], kwargs: dict) -> None:
        try:
            for event in self._watch.stream(list_fn, **kwargs):
                self._events.put((_EVENT, event))
        except Exception as e:
            self._events.put((_FAILED, e))
        else:
            self._events.put((_CLOSED, None))

    def start(self) -> None:
        self._thread.start()

    def _counted(self, item: Tuple[str, Any]) -> Tuple[str, Any]:
        if item[0] == _EVENT:
            self.received += 1
        return item

    def get(self, timeout: float) -> Tuple[str, Any]:
        return self._counted(self._events.get(timeout=timeout))

    def pending(self) -> Iterator[Tuple[str, Any]]:
        """Yield whatever is already queued without blocking."""
        while True:
            try:
                yield self._counted(self._events.get_nowait())
            except queue.Empty:
                return

    def stop(self) -> None:
        self._watch.stop()
        response = self._response
        if response is not None:
            try:
                # Unblocks a read waiting on the socket (urllib3 >= 2.3).
                response.shutdown()
            except (AttributeError, ValueError, RuntimeError) as e:
                logger.debug(f"Watch response could not be shut down: {e}")
            response.close()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(STREAM_JOIN_TIMEOUT)


class ReadinessWatcher:
    """Blocks until a Deployment, StatefulSet or Pod is ready, or times out."""

    def __init__(
        self,
        connection: ClusterConnection,
        pacing_interval: float = DEFAULT_PACING_INTERVAL,
        watch_factory: Optional[Callable[[], watch.Watch]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.connection = connection
        self.pacing_interval = pacing_interval
        self._watch_factory = watch_factory or watch.Watch
        self._sleep = sleep

    def wait_for_ready(
        self,
        kind: ResourceKind,
        obj: Any,
        timeout_seconds: float,
        ignore_ready: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> WaitOutcome:
        """
        Wait for ``obj`` to satisfy the readiness predicate of ``kind``.

        Args:
            kind: The kind of ``obj``; selects the predicate and list call.
            obj: A snapshot of the target. Its ``status.replicas`` is the
                replica count every event is compared against.
            timeout_seconds: Absolute deadline measured from call entry.
            ignore_ready: StatefulSets only. Compare ``current_replicas``
                instead of ``ready_replicas``.
            cancel: Optional event that aborts the wait when set.

        Returns:
            READY with a freshly listed copy of the object, TIMED_OUT, or
            WATCH_CLOSED.
        """
        predicate = kind.predicate
        target = predicate.coerce(obj)
        name = target.metadata.name
        namespace = target.metadata.namespace
        configured = predicate.threshold(target)
        field_selector = f"metadata.name={name}"

        logger.info(
            f"Waiting for {name} {kind.value} to be ready. "
            f"This could take up to {timeout_seconds} seconds."
        )
        outcome = self._watch_until(
            kind,
            namespace,
            lambda o: predicate.is_ready(o, configured, ignore_ready),
            timeout_seconds,
            cancel,
            target=name,
            field_selector=field_selector,
        )
        if not outcome.ready:
            return outcome

        fresh = self._relisted(
            kind, namespace, target=name, name=name, field_selector=field_selector
        )
        if kind is ResourceKind.STATEFUL_SET and ignore_ready:
            logger.info(f"All Pods in StatefulSet {name} have been created.")
        elif kind is ResourceKind.POD:
            logger.info(f"Pod {name} is {fresh.status.phase}.")
        else:
            logger.info(f"All Pods in {kind.value} {name} are ready.")
        return WaitOutcome(WaitState.READY, fresh)

    def _watch_until(
        self,
        kind: ResourceKind,
        namespace: str,
        condition: Callable[[Any], bool],
        timeout_seconds: float,
        cancel: Optional[threading.Event],
        target: str,
        **selector: str,
    ) -> WaitOutcome:
        deadline = time.monotonic() + timeout_seconds
        stream = _WatchStream(
            self._watch_factory(),
            kind.list_function(self.connection),
            namespace=namespace,
            timeout_seconds=int(math.ceil(timeout_seconds)) + WATCH_GRACE_SECONDS,
            **selector,
        )
        stream.start()
        try:
            while True:
                if cancel is not None and cancel.is_set():
                    logger.warning(f"Wait for {kind.value} '{target}' was cancelled.")
                    raise WaitCancelledError(f"Wait for {kind.value} '{target}' was cancelled.")

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    # Events that arrived during the last pacing sleep still count.
                    for tag, payload in stream.pending():
                        outcome = self._evaluate(kind, target, condition, stream, tag, payload)
                        if outcome is not None:
                            return outcome
                    logger.error(
                        f"The {kind.value} '{target}' did not reach its condition "
                        f"within the timeout period."
                    )
                    return WaitOutcome(WaitState.TIMED_OUT)

                wait_for = min(remaining, CANCEL_POLL_INTERVAL) if cancel is not None else remaining
                try:
                    tag, payload = stream.get(timeout=wait_for)
                except queue.Empty:
                    continue

                outcome = self._evaluate(kind, target, condition, stream, tag, payload)
                if outcome is not None:
                    return outcome

                pause = min(self.pacing_interval, deadline - time.monotonic())
                if pause > 0:
                    self._sleep(pause)
        finally:
            stream.stop()

    def _evaluate(
        self,
        kind: ResourceKind,
        target: str,
        condition: Callable[[Any], bool],
        stream: _WatchStream,
        tag: str,
        payload: Any,
    ) -> Optional[WaitOutcome]:
        """Turn one queued item into an outcome, or None to keep watching."""
        if tag == _CLOSED:
            logger.error(f"Watch for {kind.value} '{target}' closed unexpectedly.")
            return WaitOutcome(WaitState.WATCH_CLOSED)
        if tag == _FAILED:
            # Watch.stream raises ApiException for ERROR events, so they land here too.
            if stream.received == 0:
                logger.error(
                    f"Error when attempting to watch {kind.value} '{target}': {payload}"
                )
                raise WatchSetupError(
                    f"Could not watch {kind.value} '{target}': {payload}"
                ) from payload
            logger.error(f"Watch for {kind.value} '{target}' failed: {payload}")
            return WaitOutcome(WaitState.WATCH_CLOSED)

        if payload.get("type") == "DELETED":
            return None
        obj = kind.predicate.coerce(payload.get("object"))
        if condition(obj):
            return WaitOutcome(WaitState.READY, obj)
        return None

    def _relisted(
        self, kind: ResourceKind, namespace: str, target: str, name: str, **selector: str
    ) -> Any:
        """List again so callers get the current copy of ``name``, not the event payload."""
        result = kind.list_function(self.connection)(namespace=namespace, **selector)
        for item in result.items or []:
            if item.metadata is not None and item.metadata.name == name:
                return kind.predicate.coerce(item)
        logger.error(f"{kind.value} '{name}' matched '{target}' but is no longer listed.")
        raise ObjectNotFoundError(
            f"{kind.value} '{name}' matched '{target}' but is no longer listed in '{namespace}'."
        )


def _wait(
    kubeconfig_path: Optional[str],
    kind: ResourceKind,
    obj: Any,
    timeout_seconds: float,
    ignore_ready: bool = False,
    cancel: Optional[threading.Event] = None,
    pacing_interval: float = DEFAULT_PACING_INTERVAL,
) -> bool:
    watcher = ReadinessWatcher(get_client(kubeconfig_path), pacing_interval=pacing_interval)
    outcome = watcher.wait_for_ready(
        kind, obj, timeout_seconds, ignore_ready=ignore_ready, cancel=cancel
    )
    outcome.unwrap(kind, obj.metadata.name, timeout_seconds)
    return True


def wait_for_deployment_ready(
    kubeconfig_path: Optional[str],
    deployment: Any,
    timeout_seconds: float,
    cancel: Optional[threading.Event] = None,
    pacing_interval: float = DEFAULT_PACING_INTERVAL,
) -> bool:
    """Wait until every replica of ``deployment`` reports ready."""
    return _wait(
        kubeconfig_path,
        ResourceKind.DEPLOYMENT,
        deployment,
        timeout_seconds,
        cancel=cancel,
        pacing_interval=pacing_interval,
    )


def wait_for_statefulset_ready(
    kubeconfig_path: Optional[str],
    statefulset: Any,
    timeout_seconds: float,
    ignore_ready: bool = False,
    cancel: Optional[threading.Event] = None,
    pacing_interval: float = DEFAULT_PACING_INTERVAL,
) -> bool:
    """Wait until every replica of ``statefulset`` is ready, or only created."""
    return _wait(
        kubeconfig_path,
        ResourceKind.STATEFUL_SET,
        statefulset,
        timeout_seconds,
        ignore_ready=ignore_ready,
        cancel=cancel,
        pacing_interval=pacing_interval,
    )


def wait_for_pod_ready(
    kubeconfig_path: Optional[str],
    pod: Any,
    timeout_seconds: float,
    cancel: Optional[threading.Event] = None,
    pacing_interval: float = DEFAULT_PACING_INTERVAL,
) -> bool:
    """Wait until ``pod`` reaches the Running phase."""
    return _wait(
        kubeconfig_path,
        ResourceKind.POD,
        pod,
        timeout_seconds,
        cancel=cancel,
        pacing_interval=pacing_interval,
    )

"""
Runs commands inside a Pod over the exec subresource.

Session states:

    IDLE -> REQUEST_BUILT -> STREAM_NEGOTIATED -> [RAW_MODE_ENTERED] -> STREAMING -> CLOSED | FAILED

Raw mode is only entered for TTY sessions and is always restored when the
session leaves STREAMING.
"""
import enum
import io
import logging
import os
import select
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TextIO

from kubernetes.stream import stream

from .client import ClusterConnection, get_client
from .errors import CommandExitError, ExecSessionError
from .terminal import RawTerminal

logger = logging.getLogger(__name__)

# Seconds the relay loop blocks waiting for remote frames.
UPDATE_TIMEOUT = 1
READ_CHUNK_SIZE = 4096


class ExecState(enum.Enum):
    IDLE = "Idle"
    REQUEST_BUILT = "RequestBuilt"
    STREAM_NEGOTIATED = "StreamNegotiated"
    RAW_MODE_ENTERED = "RawModeEntered"
    STREAMING = "Streaming"
    CLOSED = "Closed"
    FAILED = "Failed"


@dataclass
class PodSessionOptions:
    """Describes a command to run inside a Pod and how to wire its streams."""

    pod_name: str
    namespace: str
    command: List[str]
    stdin: bool = True
    stdout: bool = True
    stderr: bool = True
    tty: bool = False
    container: Optional[str] = None
    input_stream: Any = field(default_factory=lambda: sys.stdin)
    output_stream: TextIO = field(default_factory=lambda: sys.stdout)
    error_stream: TextIO = field(default_factory=lambda: sys.stderr)


class PodExecSession:
    def __init__(self, connection: ClusterConnection) -> None:
        self.connection = connection
        self.state = ExecState.IDLE

    def _transition(self, state: ExecState) -> None:
        logger.debug(f"Exec session {self.state.value} -> {state.value}")
        self.state = state

    def _build_request(self, options: PodSessionOptions) -> Dict[str, Any]:
        request: Dict[str, Any] = {
            "command": options.command,
            "stdin": options.stdin,
            "stdout": options.stdout,
            "stderr": options.stderr,
            "tty": options.tty,
            "_preload_content": False,
        }
        if options.container:
            request["container"] = options.container
        return request

    def run(
        self,
        options: PodSessionOptions,
        silent: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """
        Execute ``options.command`` in the Pod and relay its streams.

        Remote stdout is discarded when ``silent`` is set; remote stderr is
        always written to ``options.error_stream``.

        Raises:
            ExecSessionError: the stream could not be negotiated, raw mode
                could not be entered, or the stream broke.
            CommandExitError: the remote command exited non-zero.
        """
        self.state = ExecState.IDLE
        request = self._build_request(options)
        self._transition(ExecState.REQUEST_BUILT)

        try:
            resp = stream(
                self.connection.core_v1.connect_get_namespaced_pod_exec,
                options.pod_name,
                options.namespace,
                **request,
            )
        except Exception as e:
            self._transition(ExecState.FAILED)
            logger.error(f"Error executing command on Pod {options.pod_name}: {e}")
            raise ExecSessionError(
                f"Could not open exec stream to Pod '{options.pod_name}': {e}"
            ) from e
        self._transition(ExecState.STREAM_NEGOTIATED)

        try:
            if options.tty:
                with RawTerminal(options.input_stream.fileno()):
                    self._transition(ExecState.RAW_MODE_ENTERED)
                    exit_code = self._relay(resp, options, silent, cancel)
            else:
                exit_code = self._relay(resp, options, silent, cancel)
        except ExecSessionError as e:
            self._transition(ExecState.FAILED)
            logger.error(f"Error running command on Pod {options.pod_name}: {e}")
            raise
        except Exception as e:
            self._transition(ExecState.FAILED)
            logger.error(f"Error running command on Pod {options.pod_name}: {e}")
            raise ExecSessionError(
                f"Exec stream to Pod '{options.pod_name}' failed: {e}"
            ) from e
        finally:
            resp.close()

        if exit_code:
            self._transition(ExecState.FAILED)
            raise CommandExitError(options.pod_name, exit_code)
        self._transition(ExecState.CLOSED)

    def _relay(
        self,
        resp: Any,
        options: PodSessionOptions,
        silent: bool,
        cancel: Optional[threading.Event],
    ) -> Optional[int]:
        self._transition(ExecState.STREAMING)
        input_fd: Optional[int] = None
        if options.stdin:
            input_fd = _input_fd(options.input_stream)
            if input_fd is None:
                # In-memory input is sent in one piece.
                data = options.input_stream.read()
                if data:
                    resp.write_stdin(data)

        while resp.is_open():
            if cancel is not None and cancel.is_set():
                raise ExecSessionError(
                    f"Exec session in Pod '{options.pod_name}' was cancelled."
                )
            input_ready = False
            if input_fd is not None:
                # Wake on either side so keystrokes are not held behind the remote read.
                readable, _, _ = select.select(
                    [resp.sock.sock, input_fd], [], [], UPDATE_TIMEOUT
                )
                input_ready = input_fd in readable
                resp.update(timeout=0)
            else:
                resp.update(timeout=UPDATE_TIMEOUT)

            if resp.peek_stdout():
                data = resp.read_stdout()
                if not silent:
                    _write(options.output_stream, data)
            if resp.peek_stderr():
                _write(options.error_stream, resp.read_stderr())
            if input_ready and not _forward_fd(resp, input_fd):
                input_fd = None
        return resp.returncode


def _write(target: TextIO, data: str) -> None:
    if data:
        target.write(data)
        target.flush()


def _input_fd(input_stream: Any) -> Optional[int]:
    try:
        return input_stream.fileno()
    except (AttributeError, io.UnsupportedOperation):
        return None


def _forward_fd(resp: Any, fd: int) -> bool:
    """Send one chunk of local input to the remote stdin. Returns False at EOF."""
    data = os.read(fd, READ_CHUNK_SIZE)
    if not data:
        return False
    resp.write_stdin(data)
    return True


def pod_exec_session(
    kubeconfig_path: Optional[str],
    options: PodSessionOptions,
    silent: bool = False,
    cancel: Optional[threading.Event] = None,
) -> None:
    """Run a command in a Pod using a connection built from ``kubeconfig_path``."""
    PodExecSession(get_client(kubeconfig_path)).run(options, silent=silent, cancel=cancel)

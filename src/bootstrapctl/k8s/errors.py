"""
Custom exception types for the bootstrapctl Kubernetes library.
"""
from typing import Optional


class BootstrapClientException(Exception):
    """Base exception for all bootstrapctl client errors."""
    pass


class KubeConfigError(BootstrapClientException):
    """Raised when the Kubernetes configuration cannot be loaded."""
    pass


class WatchSetupError(BootstrapClientException):
    """Raised when a watch request is rejected before any event arrives."""
    pass


class WatchClosedError(BootstrapClientException):
    """Raised when a watch stream ends before the target matched."""
    pass


class WaitTimeoutError(BootstrapClientException):
    """Raised when a resource does not reach its condition before the deadline."""

    def __init__(self, kind: str, target: str, timeout_seconds: float) -> None:
        self.kind = kind
        self.target = target
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"{kind} '{target}' did not reach its condition within {timeout_seconds} seconds."
        )


class WaitCancelledError(BootstrapClientException):
    """Raised when a caller cancels a wait before it finished."""
    pass


class ObjectDecodeError(BootstrapClientException):
    """Raised when a watch event carries an object of an unexpected type."""
    pass


class ObjectNotFoundError(BootstrapClientException):
    """Raised when a matched object is missing from the follow-up list call."""
    pass


class ExecSessionError(BootstrapClientException):
    """Raised when an exec session cannot be negotiated or breaks mid-stream."""
    pass


class CommandExitError(ExecSessionError):
    """Raised when the remote command exits with a non-zero code."""

    def __init__(self, pod_name: str, exit_code: Optional[int]) -> None:
        self.pod_name = pod_name
        self.exit_code = exit_code
        super().__init__(
            f"Command in Pod '{pod_name}' terminated with exit code {exit_code}."
        )


class TerminalBusyError(ExecSessionError):
    """Raised when another session already holds the terminal in raw mode."""
    pass

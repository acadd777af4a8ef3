import sys
from typing import Optional

from rich.console import Console

from ..config import Configuration
from ...k8s.errors import BootstrapClientException, CommandExitError
from ...k8s.exec import PodSessionOptions, pod_exec_session


def exec_in_pod(
    configuration: Configuration,
    pod_name: str,
    command: tuple[str, ...],
    namespace: Optional[str] = None,
    container: Optional[str] = None,
    tty: bool = False,
    silent: bool = False,
) -> None:
    """Runs a command inside a Pod, interactively when ``tty`` is set."""
    console = Console(stderr=True)
    options = PodSessionOptions(
        pod_name=pod_name,
        namespace=namespace or configuration.default_namespace,
        command=list(command),
        stdin=tty or not sys.stdin.isatty(),
        tty=tty,
        container=container,
    )
    try:
        pod_exec_session(configuration.kubeconfig_path, options, silent=silent)
    except CommandExitError as e:
        sys.exit(e.exit_code or 1)
    except BootstrapClientException as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

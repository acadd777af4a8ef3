import sys
from typing import Optional

from kubernetes import client
from rich.console import Console
from rich.table import Table

from ..config import Configuration
from ._common import KIND_NAMES
from ...k8s.client import get_client
from ...k8s.errors import BootstrapClientException
from ...k8s.locator import ResourceLocator


def find_resource(
    configuration: Configuration,
    kind_name: str,
    label_key: str,
    label_value: str,
    namespace: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> None:
    """Waits for a resource matching a label to exist and prints it."""
    console = Console()
    kind = KIND_NAMES[kind_name]
    target_namespace = namespace or configuration.default_namespace
    timeout = (
        configuration.default_timeout_seconds if timeout_seconds is None else timeout_seconds
    )
    selector = f"{label_key}={label_value}"

    try:
        locator = ResourceLocator(
            get_client(configuration.kubeconfig_path),
            pacing_interval=configuration.pacing_interval,
        )
        with console.status(f"Waiting for {kind.value} '{selector}' to be created..."):
            found = locator.find_object(
                kind, label_key, label_value, target_namespace, timeout
            ).unwrap(kind, selector, timeout)
    except BootstrapClientException as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except client.ApiException as e:
        console.print(f"Error connecting to Kubernetes: {e.reason}")
        sys.exit(1)

    table = Table()
    table.add_column("Kind", style="blue")
    table.add_column("Name", style="cyan")
    table.add_column("Namespace", style="blue")
    table.add_column("Status", style="green")
    if kind_name == "pod":
        state = found.status.phase
    else:
        state = f"{found.status.ready_replicas or 0}/{found.status.replicas or 0} ready"
    table.add_row(kind.value, found.metadata.name, found.metadata.namespace, state)
    console.print(table)

import sys
from typing import Optional

from kubernetes import client
from rich.console import Console
from rich.status import Status

from ..config import Configuration
from ._common import KIND_NAMES
from ...k8s.client import get_client
from ...k8s.errors import BootstrapClientException
from ...k8s.locator import ResourceLocator
from ...k8s.watcher import ReadinessWatcher


def wait_for_resource(
    configuration: Configuration,
    kind_name: str,
    label_key: str,
    label_value: str,
    namespace: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
    ignore_ready: bool = False,
) -> None:
    """Finds a resource by label, then waits for it to become ready."""
    console = Console()
    kind = KIND_NAMES[kind_name]
    target_namespace = namespace or configuration.default_namespace
    timeout = (
        configuration.default_timeout_seconds if timeout_seconds is None else timeout_seconds
    )
    selector = f"{label_key}={label_value}"

    try:
        connection = get_client(configuration.kubeconfig_path)
        locator = ResourceLocator(connection, pacing_interval=configuration.pacing_interval)
        watcher = ReadinessWatcher(connection, pacing_interval=configuration.pacing_interval)

        with Status(
            f"Waiting for {kind.value} '{selector}' to be created...", console=console
        ) as status:
            found = locator.find_object(
                kind, label_key, label_value, target_namespace, timeout
            ).unwrap(kind, selector, timeout)
            name = found.metadata.name

            status.update(f"{kind.value} '{name}' exists. Waiting for it to be ready...")
            watcher.wait_for_ready(
                kind, found, timeout, ignore_ready=ignore_ready
            ).unwrap(kind, name, timeout)

        console.print(f"✅ {kind.value} '{name}' is ready.")
    except BootstrapClientException as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except client.ApiException as e:
        console.print(f"Error connecting to Kubernetes: {e.reason}")
        sys.exit(1)

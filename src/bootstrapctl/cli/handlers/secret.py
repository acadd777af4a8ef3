import sys
from typing import Optional

from kubernetes import client
from rich.console import Console
from rich.table import Table

from ..config import Configuration
from ...k8s.errors import BootstrapClientException
from ...k8s.secrets import read_secret


def get_secret(
    configuration: Configuration,
    name: str,
    namespace: Optional[str] = None,
    show_values: bool = False,
) -> None:
    """Prints the keys of a Secret, and their values when asked to."""
    console = Console()
    target_namespace = namespace or configuration.default_namespace
    try:
        data = read_secret(configuration.kubeconfig_path, target_namespace, name)
    except BootstrapClientException as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except client.ApiException as e:
        console.print(f"Error reading Secret: {e.reason}")
        sys.exit(1)

    if not data:
        console.print(f"[yellow]Secret '{name}' not found or empty in namespace '{target_namespace}'.[/yellow]")
        sys.exit(1)

    table = Table(title=f"{target_namespace}/{name}")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for key in sorted(data):
        table.add_row(key, data[key] if show_values else "********")
    console.print(table)

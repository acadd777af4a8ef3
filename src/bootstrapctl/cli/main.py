import click
from rich.console import Console
from rich.prompt import Confirm
from pathlib import Path

from . import handlers
from .config import load_config, get_default_config_path, create_default_config
from ..utils.logging import configure_logging

KIND_CHOICE = click.Choice(["deployment", "statefulset", "pod"], case_sensitive=False)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the bootstrapctl config file.",
)
@click.option(
    "--kubeconfig",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to the kubeconfig file. Overrides the config file.",
)
@click.option(
    "--assume-yes", is_flag=True, help="Automatically answer yes to all prompts."
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx, config_path, kubeconfig, assume_yes, verbose) -> None:
    """Wait for and run commands in the workloads of a bootstrapped cluster."""
    ctx.ensure_object(dict)
    configure_logging(verbose)
    console = Console()

    default_config_path = get_default_config_path()
    effective_config_path = config_path if config_path else default_config_path

    if not effective_config_path.exists() and effective_config_path == default_config_path:
        if assume_yes or (
            console.is_terminal
            and Confirm.ask("Would you like to create a default config file?", default=True)
        ):
            create_default_config(effective_config_path)

    configuration = load_config(effective_config_path)
    if kubeconfig:
        configuration.kubeconfig_path = kubeconfig
    ctx.obj["CONFIG"] = configuration
    ctx.obj["ASSUME_YES"] = assume_yes


@main.command(help="Find a resource by label and wait for it to be ready.")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("label_key", type=str)
@click.argument("label_value", type=str)
@click.option("-n", "--namespace", type=str, default=None, help="The namespace to watch.")
@click.option("--timeout", type=float, default=None, help="Seconds to wait for each step.")
@click.option(
    "--ignore-ready",
    is_flag=True,
    help="StatefulSets only: wait for Pods to be created rather than ready.",
)
@click.pass_context
def wait(
    ctx, kind: str, label_key: str, label_value: str, namespace: str, timeout: float, ignore_ready: bool
) -> None:
    """Find a resource by label and wait for it to be ready."""
    handlers.wait_for_resource(
        configuration=ctx.obj["CONFIG"],
        kind_name=kind.lower(),
        label_key=label_key,
        label_value=label_value,
        namespace=namespace,
        timeout_seconds=timeout,
        ignore_ready=ignore_ready,
    )


@main.command(help="Wait for a resource matching a label to exist.")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("label_key", type=str)
@click.argument("label_value", type=str)
@click.option("-n", "--namespace", type=str, default=None, help="The namespace to watch.")
@click.option("--timeout", type=float, default=None, help="Seconds to wait.")
@click.pass_context
def find(ctx, kind: str, label_key: str, label_value: str, namespace: str, timeout: float) -> None:
    """Wait for a resource matching a label to exist."""
    handlers.find_resource(
        configuration=ctx.obj["CONFIG"],
        kind_name=kind.lower(),
        label_key=label_key,
        label_value=label_value,
        namespace=namespace,
        timeout_seconds=timeout,
    )


@main.command(name="exec", help="Run a command inside a Pod.")
@click.argument("pod_name", type=str)
@click.argument("command", nargs=-1, required=True)
@click.option("-n", "--namespace", type=str, default=None, help="The namespace of the Pod.")
@click.option("-c", "--container", type=str, default=None, help="The container to run in.")
@click.option("-t", "--tty", is_flag=True, help="Allocate a TTY and attach local input.")
@click.option("--silent", is_flag=True, help="Discard the command's standard output.")
@click.pass_context
def exec_command(
    ctx,
    pod_name: str,
    command: tuple[str, ...],
    namespace: str,
    container: str,
    tty: bool,
    silent: bool,
) -> None:
    """Run a command inside a Pod."""
    handlers.exec_in_pod(
        configuration=ctx.obj["CONFIG"],
        pod_name=pod_name,
        command=command,
        namespace=namespace,
        container=container,
        tty=tty,
        silent=silent,
    )


@main.group()
def secret() -> None:
    """Inspect bootstrap Secrets."""
    pass


@secret.command(name="get")
@click.argument("name", type=str)
@click.option("-n", "--namespace", type=str, default=None, help="The namespace of the Secret.")
@click.option("--show-values", is_flag=True, help="Print decoded values instead of masking them.")
@click.pass_context
def secret_get(ctx, name: str, namespace: str, show_values: bool) -> None:
    """Print the keys of a Secret."""
    handlers.get_secret(
        configuration=ctx.obj["CONFIG"],
        name=name,
        namespace=namespace,
        show_values=show_values,
    )


if __name__ == "__main__":
    main()

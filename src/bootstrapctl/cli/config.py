import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from rich.console import Console

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "bootstrapctl"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yml"
DEFAULT_CONFIG: Dict[str, Any] = {
    "kubeconfig": "",
    "namespace": "default",
    "wait": {
        "timeout_seconds": 300,
        "pacing_interval": 1.0,
    },
}


class Configuration:
    def __init__(self, config_data: Dict[str, Any]):
        self._config = config_data
        self._config.setdefault("wait", {})

    @property
    def kubeconfig_path(self) -> str:
        configured_value = self._config.get("kubeconfig", "")
        if configured_value:
            return str(Path(configured_value).expanduser())
        return os.environ.get("KUBECONFIG") or str(Path.home() / ".kube" / "config")

    @kubeconfig_path.setter
    def kubeconfig_path(self, value: str) -> None:
        self._config["kubeconfig"] = value

    @property
    def default_namespace(self) -> str:
        return self._config.get("namespace") or "default"

    @property
    def default_timeout_seconds(self) -> float:
        return float(self._config["wait"].get("timeout_seconds", 300))

    @property
    def pacing_interval(self) -> float:
        return float(self._config["wait"].get("pacing_interval", 1.0))


def get_default_config_path() -> Path:
    return DEFAULT_CONFIG_PATH


def create_default_config(path: Path):
    """Creates a default configuration file at the specified path."""
    console = Console()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(copy.deepcopy(DEFAULT_CONFIG), f, default_flow_style=False)
        console.print(f"[green]✅ Default configuration created at {path}[/green]")
    except OSError as e:
        console.print(f"[red]Error creating default configuration: {e}[/red]")


def merge_config(overrides: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Return a new mapping of ``defaults`` updated with ``overrides``, section by section."""
    merged = dict(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(value, merged[key])
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Path]) -> Configuration:
    user_config: Dict[str, Any] = {}
    if config_path and config_path.is_file():
        user_config = yaml.safe_load(config_path.read_text()) or {}
    return Configuration(merge_config(user_config, copy.deepcopy(DEFAULT_CONFIG)))

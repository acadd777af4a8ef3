"""
This file contains shared fixtures for all tests.

No test talks to a real cluster: API handles are MagicMocks, watch streams
and exec streams are fabricated in tests/helpers.py.
"""
from unittest.mock import MagicMock

import pytest
import yaml

from bootstrapctl.cli.config import Configuration, DEFAULT_CONFIG
from bootstrapctl.k8s.client import ClusterConnection


@pytest.fixture
def connection() -> ClusterConnection:
    """A connection whose typed APIs record every call."""
    return ClusterConnection(
        api_client=MagicMock(),
        core_v1=MagicMock(),
        apps_v1=MagicMock(),
    )


@pytest.fixture
def no_sleep() -> MagicMock:
    """Replaces the pacing sleep so tests never wait between events."""
    return MagicMock()


@pytest.fixture
def test_config(tmp_path) -> Configuration:
    kubeconfig = tmp_path / "kubeconfig"
    kubeconfig.write_text("apiVersion: v1\nkind: Config\n")
    return Configuration(
        {
            "kubeconfig": str(kubeconfig),
            "namespace": "argocd",
            "wait": {"timeout_seconds": 5, "pacing_interval": 0},
        }
    )


@pytest.fixture
def config_file(tmp_path):
    """Writes a config file the CLI can load through --config."""
    path = tmp_path / "config.yml"
    data = dict(DEFAULT_CONFIG)
    data["kubeconfig"] = str(tmp_path / "kubeconfig")
    data["namespace"] = "argocd"
    data["wait"] = {"timeout_seconds": 5, "pacing_interval": 0}
    path.write_text(yaml.safe_dump(data))
    return path

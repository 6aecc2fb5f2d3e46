"""Shared pytest fixtures for k8s_resources_advisor tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import typer
from typer.testing import CliRunner

from k8s_resources_advisor.cli.main import app
from k8s_resources_advisor.integrations.kubernetes.models import PodResources


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_app() -> typer.Typer:
    """Return the CLI app for testing."""
    return app


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear K8S_RESOURCES_* and KUBECONFIG environment variables for each test."""
    for key in list(os.environ.keys()):
        if key.startswith("K8S_RESOURCES_") or key == "KUBECONFIG":
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path]:
    """Keep file logging inside the test's tmp dir and undo root handlers."""
    log_dir = tmp_path / "logs"
    monkeypatch.setattr("k8s_resources_advisor.logging.config.LOG_DIR", log_dir)
    monkeypatch.setattr(
        "k8s_resources_advisor.logging.config.LOG_FILE", log_dir / "k8s-resources.log"
    )
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    yield log_dir
    for handler in root.handlers:
        if handler not in original_handlers:
            handler.close()
    root.handlers = original_handlers


@pytest.fixture
def make_record() -> Any:
    """Factory for PodResources records with sensible defaults."""

    def _make(**overrides: Any) -> PodResources:
        data: dict[str, Any] = {
            "pod_name": "api-7d9f8c6b5-x2x4q",
            "pod_template": "api-",
            "container_name": "api",
            "namespace": "prod",
            "node_name": "node-1",
            "memory_request": "128Mi",
            "memory_limit": "256Mi",
            "cpu_request": "100m",
            "cpu_limit": "500m",
            "qos": "Burstable",
        }
        data.update(overrides)
        return PodResources(**data)

    return _make

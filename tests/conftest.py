import base64
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner


def encode(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


def pod_list(*names: str) -> SimpleNamespace:
    return SimpleNamespace(items=[SimpleNamespace(metadata=SimpleNamespace(name=name)) for name in names])


def secret(**values: str) -> SimpleNamespace:
    return SimpleNamespace(data={key: encode(value) for key, value in values.items()})


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def v1():
    api = MagicMock()
    api.list_namespaced_pod.return_value = pod_list("billing-7d9f8c-x2k4p")
    return api


@pytest.fixture
def core_api(monkeypatch, v1):
    """Replace kubeconfig loading with a mocked CoreV1Api."""
    loader = MagicMock(return_value=v1)
    monkeypatch.setattr("kube_manager.main.core_api", loader)
    return loader


@pytest.fixture
def kubectl(monkeypatch):
    """Capture kubectl invocations instead of running them."""
    call = MagicMock(return_value=0)
    monkeypatch.setattr("kube_manager.kube.subprocess.call", call)
    return call

"""Shared fixtures for Lightspeed tests."""

import copy

import pytest

from lightspeed.config import Config


POD = {
    "apiVersion": "v1",
    "kind": "Pod",
    "metadata": {
        "name": "nginx",
        "namespace": "default",
        "labels": {"app": "nginx"},
        "managedFields": [
            {"manager": "kubectl", "operation": "Apply", "apiVersion": "v1"},
        ],
    },
    "spec": {
        "containers": [{"name": "nginx", "image": "nginx:1.25"}],
    },
    "status": {
        "phase": "Running",
        "podIP": "10.128.0.12",
    },
}


@pytest.fixture
def pod():
    """A live Pod object as returned by the resource watch."""
    return copy.deepcopy(POD)


@pytest.fixture
def config():
    """Configuration pointing at a fake console."""
    return Config(
        console_url="https://console.example.com",
        auth_token="sha256~token",
        request_timeout_seconds=600,
    )

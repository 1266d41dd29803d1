"""E2E test fixtures — mock PD server plus optional k3s-backed API server."""

from __future__ import annotations

import os
import sys
import uuid

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from tests.e2e.mock_pd import MockPDServer


@pytest.fixture
def mock_pd():
    """Start a mock PD server with five members on a random port."""
    server = MockPDServer(members=[f"basic-pd-{ordinal}" for ordinal in range(5)])
    server.start()
    yield server
    server.stop()


@pytest.fixture(scope="session")
def k3s_api_client():
    """Start k3s and return an ApiClient for it."""
    try:
        import yaml
        from docker.errors import DockerException
        from kubernetes import config
        from testcontainers.core.exceptions import ContainerStartException
        from testcontainers.k3s import K3SContainer
    except ModuleNotFoundError as exc:
        pytest.skip(f"k3s tests require testcontainers[k3s]: {exc}")

    container = K3SContainer()

    try:
        container.start()
    except (ContainerStartException, DockerException, OSError) as exc:
        pytest.skip(f"k3s unavailable in this environment: {exc}")

    api_client = config.new_client_from_config_dict(yaml.safe_load(container.config_yaml()))

    yield api_client

    container.stop()


@pytest.fixture
def k3s_namespace(k3s_api_client):
    """Create a throwaway namespace for one test."""
    from kubernetes import client

    core = client.CoreV1Api(k3s_api_client)
    name = f"pd-scaler-e2e-{uuid.uuid4().hex[:8]}"
    core.create_namespace({"metadata": {"name": name}})
    yield name
    core.delete_namespace(name)

"""Shared fixtures for unit tests — uses mock backends, no cluster needed."""

import pytest
import sys
import os

# Add project root to path so pd_scaler is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from pd_scaler.backends.mock.kube import InMemoryKubeStore
from pd_scaler.backends.mock.pd import FakePDClient
from pd_scaler.core import naming
from tests.unit.builders import CLUSTER_NAME


@pytest.fixture
def kube():
    return InMemoryKubeStore()


@pytest.fixture
def pd():
    members = [naming.ordinal_pod_name(CLUSTER_NAME, ordinal) for ordinal in range(5)]
    return FakePDClient(members=members, leader=members[0])

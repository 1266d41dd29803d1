"""Unit tests for the check that blocks decommissioning PD while in use."""

from __future__ import annotations

import pytest

from pd_scaler.core.scaler import pre_check_up_members
from tests.unit.builders import make_cluster

UP_STORE = {"1": {"id": "1", "podName": "basic-tikv-4", "state": "Up"}}


@pytest.mark.parametrize(
    "dependents",
    [
        pytest.param({"tikv_stores": UP_STORE}, id="tikv on"),
        pytest.param({"tidb_members": {"failover-tidb-0": {"name": "failover-tidb-0", "health": True}}}, id="tidb on"),
        pytest.param({"tiflash_stores": UP_STORE}, id="tiflash on"),
        pytest.param({"ticdc_replicas": 1}, id="ticdc on"),
        pytest.param({"pump_replicas": 1}, id="pump on"),
    ],
)
def test_pre_check_blocks_when_any_component_is_up(dependents):
    cluster = make_cluster(desired_replicas=0, **dependents)

    assert pre_check_up_members(cluster, "basic-pd-1") is False


def test_pre_check_passes_when_all_components_are_down():
    cluster = make_cluster(desired_replicas=0, ticdc_replicas=0, pump_replicas=0)

    assert pre_check_up_members(cluster, "basic-pd-1") is True


def test_pre_check_ignores_tombstoned_stores_and_unhealthy_tidb():
    cluster = make_cluster(
        desired_replicas=0,
        tikv_stores={"1": {"id": "1", "state": "Tombstone"}},
        tiflash_stores={"2": {"id": "2", "state": "Tombstone"}},
        tidb_members={"basic-tidb-0": {"name": "basic-tidb-0", "health": False}},
    )

    assert pre_check_up_members(cluster, "basic-pd-1") is True


def test_pre_check_logs_blocking_components(caplog):
    cluster = make_cluster(desired_replicas=0, pump_replicas=2)

    assert pre_check_up_members(cluster, "basic-pd-0") is False
    assert "pump=2" in caplog.text
    assert "basic-pd-0" in caplog.text

"""Unit tests for PD membership and leadership calls."""

from __future__ import annotations

import pytest

from pd_scaler.backends.mock import pd as fake_pd
from pd_scaler.core import members
from pd_scaler.core.errors import PDApiError, RemoteCallFailed
from tests.unit.builders import make_cluster


def test_get_leader_name(pd):
    assert members.get_leader_name(pd) == "basic-pd-0"


@pytest.mark.parametrize(
    "reported,expected",
    [
        ("basic-pd-4", True),
        ("basic-pd-4.basic-pd-peer.default.svc", True),
        ("basic-pd-40", False),
        ("other-pd-4", False),
        ("", False),
    ],
)
def test_is_member(reported, expected):
    assert members.is_member(reported, "basic-pd-4") is expected


def test_pick_transfer_target_prefers_lowest_healthy_ordinal():
    cluster = make_cluster(unhealthy=(0,))

    assert members.pick_transfer_target(cluster, exclude_ordinal=4, replicas=5) == "basic-pd-1"
    assert members.pick_transfer_target(cluster, exclude_ordinal=1, replicas=5) == "basic-pd-2"


def test_pick_transfer_target_skips_members_missing_from_status():
    cluster = make_cluster(3)

    assert members.pick_transfer_target(cluster, exclude_ordinal=0, replicas=5) == "basic-pd-1"
    assert members.pick_transfer_target(make_cluster(1), exclude_ordinal=0, replicas=1) is None


@pytest.mark.parametrize(
    "action,call,step",
    [
        (fake_pd.GET_LEADER, lambda pd: members.get_leader_name(pd), "leader-query-failed"),
        (fake_pd.TRANSFER_LEADER, lambda pd: members.transfer_leader(pd, "basic-pd-1"), "leadership-transfer-failed"),
        (fake_pd.DELETE_MEMBER, lambda pd: members.delete_member(pd, "basic-pd-4"), "member-delete-failed"),
    ],
)
def test_remote_errors_are_wrapped_with_step(pd, action, call, step):
    def fail(_):
        raise PDApiError("connection refused")

    pd.add_reaction(action, fail)

    with pytest.raises(RemoteCallFailed) as exc_info:
        call(pd)

    assert exc_info.value.step == step
    assert "connection refused" in str(exc_info.value)
    assert pd.actions() == [action]


def test_transfer_and_delete_are_called_once(pd):
    members.transfer_leader(pd, "basic-pd-2")
    members.delete_member(pd, "basic-pd-4")

    assert pd.calls == [(fake_pd.TRANSFER_LEADER, "basic-pd-2"), (fake_pd.DELETE_MEMBER, "basic-pd-4")]
    assert pd.leader == "basic-pd-2"

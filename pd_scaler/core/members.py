"""PD membership and leadership calls.

Thin wrappers over a PDClient: each call is made once and any failure is
re-raised as RemoteCallFailed naming the step.
"""

from __future__ import annotations

import logging

from pd_scaler.core import naming
from pd_scaler.core.errors import RemoteCallFailed
from pd_scaler.core.interfaces import PDClient
from pd_scaler.core.models import ClusterSnapshot

logger = logging.getLogger(__name__)


def get_leader_name(pd: PDClient) -> str:
    try:
        leader = pd.get_leader()
    except Exception as exc:
        logger.error("Failed to get PD leader: %s", exc)
        raise RemoteCallFailed(f"failed to get PD leader: {exc}", step="leader-query-failed") from exc
    return leader.get("name", "")


def transfer_leader(pd: PDClient, name: str) -> None:
    try:
        pd.transfer_leader(name)
    except Exception as exc:
        logger.error("Failed to transfer PD leader to %s: %s", name, exc)
        raise RemoteCallFailed(
            f"failed to transfer PD leader to {name}: {exc}",
            step="leadership-transfer-failed",
        ) from exc
    logger.info("Transferred PD leader to %s", name)


def delete_member(pd: PDClient, name: str) -> None:
    try:
        pd.delete_member(name)
    except Exception as exc:
        logger.error("Failed to delete PD member %s: %s", name, exc)
        raise RemoteCallFailed(
            f"failed to delete PD member {name}: {exc}",
            step="member-delete-failed",
        ) from exc
    logger.info("Deleted PD member %s", name)


def is_member(reported_name: str, member_name: str) -> bool:
    """Match a PD-reported member name against a pod's member name.

    PD may report the peer FQDN (``basic-pd-0.basic-pd-peer.ns.svc``).
    """
    return reported_name == member_name or reported_name.startswith(member_name + ".")


def pick_transfer_target(cluster: ClusterSnapshot, exclude_ordinal: int, replicas: int) -> str | None:
    """Return the lowest-ordinal healthy member other than exclude_ordinal."""
    for ordinal in range(replicas):
        if ordinal == exclude_ordinal:
            continue
        name = naming.ordinal_pod_name(cluster.name, ordinal)
        member = cluster.pd.members.get(name)
        if member is not None and member.health:
            return name
    return None

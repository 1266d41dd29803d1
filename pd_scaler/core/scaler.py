"""PD scaler — one ordinal step of scale-out or scale-in per call.

Cloud-agnostic: depends on the VolumeStore, PodLister and PDClient protocols.
A call either returns the committed replica count or raises a ScaleError and
leaves the StatefulSet untouched. Remote mutations that already succeeded
(a leader transfer, a member delete) are not rolled back; the reconciliation
loop re-drives the whole call.
"""

from __future__ import annotations

import copy
import logging

from pd_scaler.core import members, naming, volumes as volume_protocol
from pd_scaler.core.errors import DependencyBlocked, NotSynced, RemoteCallFailed
from pd_scaler.core.interfaces import PDClient, PodLister, VolumeStore
from pd_scaler.core.models import TOMBSTONE_STATE, UPGRADE_PHASE, ClusterSnapshot, ScaleResult

logger = logging.getLogger(__name__)


def get_replicas(statefulset: dict) -> int:
    """Read spec.replicas; unset means 1, as the API server defaults it."""
    replicas = (statefulset.get("spec") or {}).get("replicas")
    return 1 if replicas is None else int(replicas)


def _scale_step(old_set: dict, new_set: dict, direction: int) -> tuple[int, int]:
    """Validate a one-step change and return (target replicas, affected ordinal)."""
    old = get_replicas(old_set)
    new = get_replicas(new_set)
    if new - old != direction:
        raise ValueError(
            f"StatefulSet {old_set.get('metadata', {}).get('name')} must change by "
            f"exactly {direction:+d} replica, got {old} -> {new}"
        )
    ordinal = old if direction > 0 else old - 1
    return new, ordinal


def _require_synced(cluster: ClusterSnapshot, action: str) -> None:
    if not cluster.pd.synced:
        raise NotSynced(
            f"TidbCluster {cluster.namespace}/{cluster.name}'s pd status sync failed, can't {action} now"
        )


def scale_out(
    cluster: ClusterSnapshot,
    old_set: dict,
    new_set: dict,
    *,
    volumes: VolumeStore,
) -> ScaleResult:
    """Add the member at ordinal = current replicas.

    A PVC left at that ordinal by an earlier scale-in is deleted first so the
    new pod binds a fresh volume.
    """
    _require_synced(cluster, "scale out")
    replicas, ordinal = _scale_step(old_set, new_set, +1)

    resolved = tuple(sorted(cluster.pd.failure_members))
    if resolved:
        logger.info(
            "Scaling out PD of %s/%s to replace failure members %s",
            cluster.namespace,
            cluster.name,
            ", ".join(resolved),
        )

    logger.info(
        "Scaling out PD statefulset %s/%s, ordinal: %d (replicas: %d)",
        cluster.namespace,
        naming.set_name(cluster.name),
        ordinal,
        replicas,
    )
    volume_protocol.delete_defer_deleting_pvcs(cluster, ordinal, volumes)

    return ScaleResult(replicas=replicas, ordinal=ordinal, resolved_failure_members=resolved)


def scale_in(
    cluster: ClusterSnapshot,
    old_set: dict,
    new_set: dict,
    *,
    volumes: VolumeStore,
    pods: PodLister,
    pd: PDClient,
) -> ScaleResult:
    """Remove the member at the last ordinal.

    Order: safety gate (only when going to zero), leader transfer, member
    delete, then marking the pod's PVCs for deferred deletion.
    """
    _require_synced(cluster, "scale in")
    replicas, ordinal = _scale_step(old_set, new_set, -1)
    member_name = naming.ordinal_pod_name(cluster.name, ordinal)

    if replicas == 0 or cluster.pd.desired_replicas == 0:
        if not pre_check_up_members(cluster, member_name):
            raise DependencyBlocked(
                f"PD of TidbCluster {cluster.namespace}/{cluster.name} is in use, "
                f"can't scale in pod {member_name}"
            )

    # Upgrading does not block scale-in.
    if cluster.pd.phase == UPGRADE_PHASE:
        logger.info("PD of %s/%s is upgrading, scaling in anyway", cluster.namespace, cluster.name)

    logger.info(
        "Scaling in PD statefulset %s/%s, ordinal: %d (replicas: %d)",
        cluster.namespace,
        naming.set_name(cluster.name),
        ordinal,
        replicas,
    )

    leader = members.get_leader_name(pd)
    if members.is_member(leader, member_name):
        _move_leader_away(cluster, pd, ordinal, get_replicas(old_set))

    members.delete_member(pd, member_name)

    pvcs = volume_protocol.resolve_pvcs_from_pod(cluster, member_name, pods, volumes)
    for pvc in pvcs:
        volume_protocol.mark_defer_deleting(pvc, volumes)

    return ScaleResult(replicas=replicas, ordinal=ordinal)


def _move_leader_away(cluster: ClusterSnapshot, pd: PDClient, ordinal: int, replicas: int) -> None:
    target = members.pick_transfer_target(cluster, ordinal, replicas)
    if target is not None:
        members.transfer_leader(pd, target)
        return

    if replicas <= 1:
        logger.info("PD member at ordinal %d is the last one, no leader transfer", ordinal)
        return

    raise RemoteCallFailed(
        f"no healthy PD member of {cluster.namespace}/{cluster.name} to take over leadership",
        step="leadership-transfer-failed",
    )


def _live_stores(stores: dict[str, dict]) -> int:
    return sum(1 for store in stores.values() if store.get("state") != TOMBSTONE_STATE)


def pre_check_up_members(cluster: ClusterSnapshot, pod_name: str) -> bool:
    """Return True when no other component still depends on PD.

    Pure check over the snapshot, used before PD is driven to zero members.
    """
    in_use = {
        "tikv": _live_stores(cluster.tikv_stores),
        "tidb": sum(1 for member in cluster.tidb_members.values() if member.get("health")),
        "tiflash": _live_stores(cluster.tiflash_stores),
        "ticdc": cluster.ticdc_replicas,
        "pump": cluster.pump_replicas,
    }
    in_use = {component: count for component, count in in_use.items() if count}
    if in_use:
        logger.error(
            "The PD is in use by TidbCluster %s/%s (%s), can't scale in PD, podname %s",
            cluster.namespace,
            cluster.name,
            ", ".join(f"{component}={count}" for component, count in in_use.items()),
            pod_name,
        )
        return False
    return True


def scale(
    cluster: ClusterSnapshot,
    old_set: dict,
    desired_set: dict,
    *,
    volumes: VolumeStore,
    pods: PodLister,
    pd: PDClient,
) -> ScaleResult | None:
    """Move one step from old_set towards desired_set.

    Returns None when the replica counts already match.
    """
    old = get_replicas(old_set)
    desired = get_replicas(desired_set)
    if desired == old:
        return None

    step_set = copy.deepcopy(desired_set)
    step_set.setdefault("spec", {})["replicas"] = old + 1 if desired > old else old - 1

    if desired > old:
        return scale_out(cluster, old_set, step_set, volumes=volumes)
    return scale_in(cluster, old_set, step_set, volumes=volumes, pods=pods, pd=pd)


def commit(new_set: dict, result: ScaleResult) -> dict:
    """Return a copy of new_set carrying the committed replica count."""
    committed = copy.deepcopy(new_set)
    committed.setdefault("spec", {})["replicas"] = result.replicas
    return committed

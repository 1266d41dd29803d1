"""Build the scaler's cluster snapshot from a TidbCluster resource."""

from __future__ import annotations

from pd_scaler.core.models import NORMAL_PHASE, ClusterSnapshot, PDMember, PDStatus


def _statefulset_replicas(component_status: dict) -> int:
    statefulset = component_status.get("statefulSet") or {}
    return int(statefulset.get("replicas") or 0)


def _pd_members(members: dict) -> dict[str, PDMember]:
    return {
        name: PDMember(
            name=member.get("name", name),
            member_id=str(member.get("id", "")),
            client_url=member.get("clientURL", ""),
            health=bool(member.get("health", False)),
        )
        for name, member in members.items()
    }


def snapshot_from_resource(resource: dict) -> ClusterSnapshot:
    """Return a read-only snapshot of a TidbCluster custom resource dict."""
    metadata = resource.get("metadata", {})
    name = metadata.get("name")
    if not name:
        raise ValueError("TidbCluster resource has no metadata.name")

    spec = resource.get("spec") or {}
    status = resource.get("status") or {}
    pd_status = status.get("pd") or {}

    pd = PDStatus(
        synced=bool(pd_status.get("synced", False)),
        phase=pd_status.get("phase") or NORMAL_PHASE,
        desired_replicas=int((spec.get("pd") or {}).get("replicas") or 0),
        members=_pd_members(pd_status.get("members") or {}),
        failure_members=dict(pd_status.get("failureMembers") or {}),
    )

    return ClusterSnapshot(
        name=name,
        namespace=metadata.get("namespace", "default"),
        pd=pd,
        tikv_stores=dict((status.get("tikv") or {}).get("stores") or {}),
        tiflash_stores=dict((status.get("tiflash") or {}).get("stores") or {}),
        tidb_members=dict((status.get("tidb") or {}).get("members") or {}),
        ticdc_replicas=_statefulset_replicas(status.get("ticdc") or {}),
        pump_replicas=_statefulset_replicas(status.get("pump") or {}),
    )

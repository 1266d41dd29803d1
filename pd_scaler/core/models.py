"""Read-only cluster snapshot consumed by the scaler."""

from __future__ import annotations

from dataclasses import dataclass, field

UPGRADE_PHASE = "Upgrade"
NORMAL_PHASE = "Normal"

TOMBSTONE_STATE = "Tombstone"


@dataclass(frozen=True)
class PDMember:
    name: str
    member_id: str = ""
    client_url: str = ""
    health: bool = False


@dataclass(frozen=True)
class PDStatus:
    synced: bool = False
    phase: str = NORMAL_PHASE
    desired_replicas: int = 0
    members: dict[str, PDMember] = field(default_factory=dict)
    failure_members: dict[str, dict] = field(default_factory=dict)


@dataclass(frozen=True)
class ClusterSnapshot:
    """Status of one TidbCluster as seen by the reconciler.

    Dependent component fields mirror the cluster status: store maps are keyed
    by store id, TiDB members by name, and TiCDC/Pump carry the replica count
    reported by their StatefulSet status.
    """

    name: str
    namespace: str
    pd: PDStatus = field(default_factory=PDStatus)
    tikv_stores: dict[str, dict] = field(default_factory=dict)
    tiflash_stores: dict[str, dict] = field(default_factory=dict)
    tidb_members: dict[str, dict] = field(default_factory=dict)
    ticdc_replicas: int = 0
    pump_replicas: int = 0


@dataclass(frozen=True)
class ScaleResult:
    """Outcome of one successful scale step.

    The caller persists ``replicas`` onto the StatefulSet and clears
    ``resolved_failure_members`` from the PD failover status.
    """

    replicas: int
    ordinal: int
    resolved_failure_members: tuple[str, ...] = ()

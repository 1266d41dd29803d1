"""Deterministic names, labels and annotations for PD pods and volumes."""

from __future__ import annotations

PD_MEMBER_TYPE = "pd"

LABEL_INSTANCE = "app.kubernetes.io/instance"
LABEL_COMPONENT = "app.kubernetes.io/component"
LABEL_POD_NAME = "tidb.pingcap.com/pod-name"

ANN_PVC_DEFER_DELETING = "tidb.pingcap.com/pvc-defer-deleting"


def set_name(cluster_name: str, member_type: str = PD_MEMBER_TYPE) -> str:
    return f"{cluster_name}-{member_type}"


def ordinal_pod_name(cluster_name: str, ordinal: int, member_type: str = PD_MEMBER_TYPE) -> str:
    """Pod name, which is also the PD member name."""
    return f"{set_name(cluster_name, member_type)}-{ordinal}"


def ordinal_pvc_name(statefulset_name: str, ordinal: int, member_type: str = PD_MEMBER_TYPE) -> str:
    """PVC name created from the StatefulSet volume claim template."""
    return f"{member_type}-{statefulset_name}-{ordinal}"


def pvc_selector(cluster_name: str, ordinal: int, member_type: str = PD_MEMBER_TYPE) -> dict[str, str]:
    """Label selector matching the PVCs bound to one ordinal."""
    return {
        LABEL_INSTANCE: cluster_name,
        LABEL_COMPONENT: member_type,
        LABEL_POD_NAME: ordinal_pod_name(cluster_name, ordinal, member_type),
    }


def cluster_selector(cluster_name: str, member_type: str = PD_MEMBER_TYPE) -> dict[str, str]:
    return {LABEL_INSTANCE: cluster_name, LABEL_COMPONENT: member_type}


"""Deferred deletion of PD volumes.

A PVC is never deleted as a side effect of removing its pod. Scale-in only
annotates it with the time it was released; the next scale-out at the same
ordinal deletes it right before the new pod claims the ordinal again. Until
then an operator can rescue the data by clearing the annotation.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone

from pd_scaler.core import naming
from pd_scaler.core.errors import NotFound, StorageInconsistent, StorageUpdateFailed
from pd_scaler.core.interfaces import PodLister, VolumeStore
from pd_scaler.core.models import ClusterSnapshot

logger = logging.getLogger(__name__)

SKIP_PVC_NOT_FOUND = "pvc-not-found"
SKIP_ANNOTATIONS_NIL = "annotations-nil"
SKIP_NO_DEFER_ANNOTATION = "no-defer-annotation"

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _name(obj: dict) -> str:
    return obj.get("metadata", {}).get("name", "")


def is_defer_deleting(pvc: dict) -> bool:
    annotations = pvc.get("metadata", {}).get("annotations") or {}
    return naming.ANN_PVC_DEFER_DELETING in annotations


def defer_deleting_since(pvc: dict) -> datetime | None:
    """Return when the PVC was marked, or None if unmarked or unparsable."""
    annotations = pvc.get("metadata", {}).get("annotations") or {}
    value = annotations.get(naming.ANN_PVC_DEFER_DELETING)
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("PVC %s has an unparsable defer-deleting annotation: %r", _name(pvc), value)
        return None


def mark_defer_deleting(pvc: dict, volumes: VolumeStore, now: datetime | None = None) -> bool:
    """Annotate a PVC as reclaimable.

    Returns False when the PVC was already marked; the original timestamp is
    kept so re-driven scale-ins do not extend the rescue window.
    """
    if is_defer_deleting(pvc):
        logger.info("PVC %s is already marked for deferred deletion", _name(pvc))
        return False

    now = now or datetime.now(timezone.utc)
    updated = copy.deepcopy(pvc)
    metadata = updated.setdefault("metadata", {})
    annotations = metadata.get("annotations") or {}
    annotations[naming.ANN_PVC_DEFER_DELETING] = now.strftime(TIMESTAMP_FORMAT)
    metadata["annotations"] = annotations

    try:
        volumes.update_pvc(updated)
    except Exception as exc:
        logger.error("Failed to mark PVC %s for deferred deletion: %s", _name(pvc), exc)
        raise StorageUpdateFailed(
            f"failed to mark PVC {_name(pvc)} for deferred deletion: {exc}",
            step="volume-mark-failed",
        ) from exc

    logger.info("Marked PVC %s for deferred deletion", _name(pvc))
    return True


def clear_defer_deleting(pvc: dict, volumes: VolumeStore) -> bool:
    """Remove the deferred-deletion marker so a later scale-out keeps the PVC."""
    if not is_defer_deleting(pvc):
        return False

    updated = copy.deepcopy(pvc)
    updated["metadata"]["annotations"].pop(naming.ANN_PVC_DEFER_DELETING)
    volumes.update_pvc(updated)
    logger.info("Cleared deferred deletion on PVC %s", _name(pvc))
    return True


def delete_defer_deleting_pvcs(
    cluster: ClusterSnapshot,
    ordinal: int,
    volumes: VolumeStore,
) -> dict[str, str]:
    """Delete the marked PVCs left behind at an ordinal.

    Returns the reasons for every PVC that was not deleted, keyed by PVC name
    (or by pod name when the ordinal has no PVC at all).
    """
    pod_name = naming.ordinal_pod_name(cluster.name, ordinal)
    pvcs = volumes.list_pvcs(cluster.namespace, naming.pvc_selector(cluster.name, ordinal))
    if not pvcs:
        logger.info("No PVC found for pod %s/%s, nothing to reclaim", cluster.namespace, pod_name)
        return {pod_name: SKIP_PVC_NOT_FOUND}

    skipped = {}
    for pvc in pvcs:
        pvc_name = _name(pvc)
        if pvc.get("metadata", {}).get("annotations") is None:
            skipped[pvc_name] = SKIP_ANNOTATIONS_NIL
            continue
        if not is_defer_deleting(pvc):
            skipped[pvc_name] = SKIP_NO_DEFER_ANNOTATION
            continue

        try:
            volumes.delete_pvc(cluster.namespace, pvc_name)
        except NotFound:
            logger.info("PVC %s/%s is already gone", cluster.namespace, pvc_name)
            continue
        except Exception as exc:
            logger.error("Failed to delete deferred PVC %s/%s: %s", cluster.namespace, pvc_name, exc)
            raise StorageUpdateFailed(
                f"failed to delete deferred PVC {cluster.namespace}/{pvc_name}: {exc}",
                step="volume-reclaim-failed",
            ) from exc
        logger.info(
            "Deleted deferred PVC %s/%s (marked at %s)",
            cluster.namespace,
            pvc_name,
            pvc["metadata"]["annotations"][naming.ANN_PVC_DEFER_DELETING],
        )

    return skipped


def resolve_pvcs_from_pod(
    cluster: ClusterSnapshot,
    pod_name: str,
    pods: PodLister,
    volumes: VolumeStore,
) -> list[dict]:
    """Return every PVC the pod declares, failing if any cannot be found."""
    pod = pods.get_pod(cluster.namespace, pod_name)
    if pod is None:
        raise StorageInconsistent(f"pod {cluster.namespace}/{pod_name} not found in cache")

    claim_names = [
        volume["persistentVolumeClaim"]["claimName"]
        for volume in pod.get("spec", {}).get("volumes") or []
        if volume.get("persistentVolumeClaim")
    ]
    if not claim_names:
        raise StorageInconsistent(f"pod {cluster.namespace}/{pod_name} has no PVC")

    pvcs = []
    for claim_name in claim_names:
        pvc = volumes.get_pvc(cluster.namespace, claim_name)
        if pvc is None:
            raise StorageInconsistent(
                f"PVC {cluster.namespace}/{claim_name} of pod {pod_name} not found in cache"
            )
        pvcs.append(pvc)
    return pvcs


def list_deferred_pvcs(cluster_name: str, namespace: str, volumes: VolumeStore) -> list[dict]:
    """List the cluster's PD PVCs that are waiting for deferred deletion."""
    pvcs = volumes.list_pvcs(namespace, naming.cluster_selector(cluster_name))
    return sorted((pvc for pvc in pvcs if is_defer_deleting(pvc)), key=_name)

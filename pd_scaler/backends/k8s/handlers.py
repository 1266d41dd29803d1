"""Kubernetes entry point for the PD scaler.

A thin wrapper that builds backend dependencies, parses the TidbCluster
resource, calls the cloud-agnostic scaler and persists the committed replica
count. All scaling logic lives in pd_scaler/core/.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


# ---- Shared helpers ----


def _get_api_client():
    """Build a Kubernetes ApiClient from environment configuration."""
    from pd_scaler.backends.k8s.kube import load_api_client
    from pd_scaler.shared.config import KUBE_IN_CLUSTER

    return load_api_client(in_cluster=KUBE_IN_CLUSTER())


def _get_kube_store(api_client):
    from pd_scaler.backends.k8s.kube import KubeStore

    return KubeStore(api_client=api_client)


def _get_pd_client(cluster):
    from pd_scaler.backends.k8s.pd import pd_client_for

    return pd_client_for(cluster.name, cluster.namespace)


def _persist_statefulset(api_client, statefulset: dict) -> None:
    """Patch the committed replica count onto the live StatefulSet."""
    from kubernetes import client

    metadata = statefulset["metadata"]
    client.AppsV1Api(api_client).patch_namespaced_stateful_set(
        name=metadata["name"],
        namespace=metadata.get("namespace", "default"),
        body={"spec": {"replicas": statefulset["spec"]["replicas"]}},
    )


# ---- PD scaling ----


def pd_scale_handler(cluster_resource: dict, old_set: dict, desired_set: dict) -> dict:
    """Advance the PD StatefulSet one step towards desired_set.

    Returns a summary consumed by the reconciliation loop. A failed step is
    reported with its name and whether re-driving it later can succeed.
    """
    from pd_scaler.core.cluster import snapshot_from_resource
    from pd_scaler.core.errors import ScaleError
    from pd_scaler.core.scaler import commit, get_replicas, scale

    cluster = snapshot_from_resource(cluster_resource)
    api_client = _get_api_client()
    store = _get_kube_store(api_client)
    pd = _get_pd_client(cluster)

    try:
        result = scale(cluster, old_set, desired_set, volumes=store, pods=store, pd=pd)
    except ScaleError as exc:
        logger.warning("PD scale of %s/%s failed at %s: %s", cluster.namespace, cluster.name, exc.step, exc)
        return {
            "ok": False,
            "step": exc.step,
            "retryable": exc.retryable,
            "error": str(exc),
            "replicas": get_replicas(old_set),
        }

    if result is None:
        return {"ok": True, "changed": False, "replicas": get_replicas(old_set)}

    _persist_statefulset(api_client, commit(desired_set, result))
    logger.info("PD of %s/%s committed to %d replicas", cluster.namespace, cluster.name, result.replicas)
    return {
        "ok": True,
        "changed": True,
        "replicas": result.replicas,
        "ordinal": result.ordinal,
        "resolved_failure_members": list(result.resolved_failure_members),
    }

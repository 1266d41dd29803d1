"""Kubernetes-backed PVC and pod access."""

from __future__ import annotations

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from pd_scaler.core.errors import NotFound


def load_api_client(in_cluster: bool = False) -> client.ApiClient:
    """Load in-cluster or kubeconfig credentials and return an ApiClient."""
    if in_cluster:
        config.load_incluster_config()
    else:
        config.load_kube_config()
    return client.ApiClient()


class KubeStore:
    """Implements VolumeStore and PodLister on top of CoreV1Api.

    Objects are returned as plain dicts in API-server JSON form.
    """

    def __init__(self, api_client: client.ApiClient | None = None, in_cluster: bool = False):
        self._api_client = api_client or load_api_client(in_cluster)
        self._core = client.CoreV1Api(self._api_client)

    def _to_dict(self, obj) -> dict:
        return self._api_client.sanitize_for_serialization(obj)

    # --- PVCs ---

    def list_pvcs(self, namespace: str, selector: dict[str, str]) -> list[dict]:
        label_selector = ",".join(f"{k}={v}" for k, v in sorted(selector.items()))
        resp = self._core.list_namespaced_persistent_volume_claim(
            namespace=namespace, label_selector=label_selector
        )
        return [self._to_dict(item) for item in resp.items]

    def get_pvc(self, namespace: str, name: str) -> dict | None:
        try:
            pvc = self._core.read_namespaced_persistent_volume_claim(name=name, namespace=namespace)
        except ApiException as exc:
            if exc.status == 404:
                return None
            raise
        return self._to_dict(pvc)

    def update_pvc(self, pvc: dict) -> None:
        # Replace keeps metadata.resourceVersion, so a concurrent writer gets a 409.
        metadata = pvc["metadata"]
        self._core.replace_namespaced_persistent_volume_claim(
            name=metadata["name"],
            namespace=metadata.get("namespace", "default"),
            body=pvc,
        )

    def delete_pvc(self, namespace: str, name: str) -> None:
        try:
            self._core.delete_namespaced_persistent_volume_claim(name=name, namespace=namespace)
        except ApiException as exc:
            if exc.status == 404:
                raise NotFound(f"PVC {namespace}/{name} not found") from exc
            raise

    # --- Pods ---

    def get_pod(self, namespace: str, name: str) -> dict | None:
        try:
            pod = self._core.read_namespaced_pod(name=name, namespace=namespace)
        except ApiException as exc:
            if exc.status == 404:
                return None
            raise
        return self._to_dict(pod)

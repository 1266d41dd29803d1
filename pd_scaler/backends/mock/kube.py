"""In-memory PVC and pod cache for testing."""

from __future__ import annotations

import copy

from pd_scaler.core.errors import NotFound


def _key(obj: dict) -> tuple[str, str]:
    metadata = obj["metadata"]
    return metadata.get("namespace", "default"), metadata["name"]


class InMemoryKubeStore:
    """Implements VolumeStore and PodLister.

    An error set with set_delete_pvc_error / set_update_pvc_error is raised on
    every call once ``after`` calls have succeeded.
    """

    def __init__(self):
        self._pvcs: dict[tuple[str, str], dict] = {}
        self._pods: dict[tuple[str, str], dict] = {}
        self.deleted: list[str] = []
        self.updated: list[str] = []
        self._delete_error: Exception | None = None
        self._delete_error_after = 0
        self._update_error: Exception | None = None
        self._update_error_after = 0

    # --- PVCs ---

    def add_pvc(self, pvc: dict) -> None:
        self._pvcs[_key(pvc)] = copy.deepcopy(pvc)

    def list_pvcs(self, namespace: str, selector: dict[str, str]) -> list[dict]:
        results = []
        for (ns, _), pvc in self._pvcs.items():
            labels = pvc["metadata"].get("labels") or {}
            if ns == namespace and all(labels.get(k) == v for k, v in selector.items()):
                results.append(copy.deepcopy(pvc))
        return results

    def get_pvc(self, namespace: str, name: str) -> dict | None:
        pvc = self._pvcs.get((namespace, name))
        return copy.deepcopy(pvc) if pvc is not None else None

    def update_pvc(self, pvc: dict) -> None:
        if self._update_error is not None:
            if self._update_error_after <= 0:
                raise self._update_error
            self._update_error_after -= 1
        key = _key(pvc)
        if key not in self._pvcs:
            raise NotFound(f"PVC {key[0]}/{key[1]} not found")
        self._pvcs[key] = copy.deepcopy(pvc)
        self.updated.append(key[1])

    def delete_pvc(self, namespace: str, name: str) -> None:
        if self._delete_error is not None:
            if self._delete_error_after <= 0:
                raise self._delete_error
            self._delete_error_after -= 1
        if (namespace, name) not in self._pvcs:
            raise NotFound(f"PVC {namespace}/{name} not found")
        del self._pvcs[(namespace, name)]
        self.deleted.append(name)

    def set_delete_pvc_error(self, error: Exception | None, after: int = 0) -> None:
        self._delete_error = error
        self._delete_error_after = after

    def set_update_pvc_error(self, error: Exception | None, after: int = 0) -> None:
        self._update_error = error
        self._update_error_after = after

    # --- Pods ---

    def add_pod(self, pod: dict) -> None:
        self._pods[_key(pod)] = copy.deepcopy(pod)

    def get_pod(self, namespace: str, name: str) -> dict | None:
        pod = self._pods.get((namespace, name))
        return copy.deepcopy(pod) if pod is not None else None

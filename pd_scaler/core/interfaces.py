"""Abstract interfaces for PD scaler backends.

Core scaling logic depends only on these protocols, never on the Kubernetes
client or an HTTP library. Lookups answer from the reconciler's local cache;
"not there" is a None result (or NotFound on delete), never an exception
mixed up with transport errors.
"""

from __future__ import annotations

from typing import Protocol


class VolumeStore(Protocol):
    """PersistentVolumeClaim cache and mutator."""

    def list_pvcs(self, namespace: str, selector: dict[str, str]) -> list[dict]:
        """List PVCs whose labels match every key/value in selector."""
        ...

    def get_pvc(self, namespace: str, name: str) -> dict | None:
        """Get a single PVC by name."""
        ...

    def update_pvc(self, pvc: dict) -> None:
        """Write back a modified PVC."""
        ...

    def delete_pvc(self, namespace: str, name: str) -> None:
        """Delete a PVC. Raises NotFound if it does not exist."""
        ...


class PodLister(Protocol):
    """Pod cache."""

    def get_pod(self, namespace: str, name: str) -> dict | None:
        """Get a single pod by name."""
        ...


class PDClient(Protocol):
    """PD control-plane API for one cluster.

    Every method is a single request/response and raises PDApiError on
    failure.
    """

    def get_members(self) -> list[dict]:
        """List current PD members."""
        ...

    def get_leader(self) -> dict:
        """Return the current leader member record."""
        ...

    def transfer_leader(self, name: str) -> None:
        """Move leadership to the named member."""
        ...

    def delete_member(self, name: str) -> None:
        """Remove the named member from the consensus group."""
        ...

"""Error types raised by the PD scaler.

Every ScaleError names the step that failed. The reconciliation loop decides
whether and when to re-drive the call; nothing here is retried internally.
"""

from __future__ import annotations


class ScaleError(Exception):
    """A scale call failed; the replica count was not changed."""

    step = "scale-failed"
    retryable = True

    def __init__(self, message: str, *, step: str | None = None):
        super().__init__(message)
        if step is not None:
            self.step = step


class NotSynced(ScaleError):
    step = "not-synced"


class DependencyBlocked(ScaleError):
    step = "safety-gate-blocked"


class RemoteCallFailed(ScaleError):
    step = "remote-call-failed"


class StorageInconsistent(ScaleError):
    step = "volume-lookup-missing"
    retryable = False


class StorageUpdateFailed(ScaleError):
    step = "storage-update-failed"


# --- Backend errors ---


class NotFound(LookupError):
    """A PVC or pod does not exist."""


class PDApiError(Exception):
    """A PD API request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

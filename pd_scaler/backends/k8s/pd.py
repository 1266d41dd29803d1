"""PD HTTP API client."""

from __future__ import annotations

import logging

import requests

from pd_scaler.core.errors import PDApiError
from pd_scaler.core.members import is_member
from pd_scaler.shared import config

logger = logging.getLogger(__name__)

MEMBERS_PREFIX = "pd/api/v1/members"
LEADER_PREFIX = "pd/api/v1/leader"


class PDHttpClient:
    """Talks to one PD cluster through its v1 HTTP API.

    No retries; transport and non-2xx responses raise PDApiError.
    """

    def __init__(self, url: str, timeout: float = 5.0):
        self.url = url.rstrip("/")
        self.timeout = timeout

    def _request(self, method: str, path: str) -> requests.Response:
        url = f"{self.url}/{path}"
        try:
            resp = requests.request(method, url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise PDApiError(f"{method} {url} failed: {exc}") from exc
        if resp.status_code >= 300:
            raise PDApiError(
                f"{method} {url} returned {resp.status_code}: {resp.text.strip()}",
                status_code=resp.status_code,
            )
        return resp

    def get_members(self) -> list[dict]:
        return self._request("GET", MEMBERS_PREFIX).json().get("members") or []

    def get_leader(self) -> dict:
        return self._request("GET", LEADER_PREFIX).json()

    def _reported_name(self, name: str) -> str | None:
        """Return the name PD reports for a pod's member (short or peer FQDN)."""
        for member in self.get_members():
            reported = member.get("name") or ""
            if is_member(reported, name):
                return reported
        return None

    def transfer_leader(self, name: str) -> None:
        target = self._reported_name(name) or name
        self._request("POST", f"{LEADER_PREFIX}/transfer/{target}")

    def delete_member(self, name: str) -> None:
        """Delete a member; a member that is already gone is not an error."""
        reported = self._reported_name(name)
        if reported is None:
            logger.info("PD member %s is not in the member list, skipping delete", name)
            return
        self._request("DELETE", f"{MEMBERS_PREFIX}/name/{reported}")


def pd_client_for(cluster_name: str, namespace: str) -> PDHttpClient:
    """Build a client for a cluster from PD_URL_TEMPLATE."""
    url = config.PD_URL_TEMPLATE().format(cluster=cluster_name, namespace=namespace)
    return PDHttpClient(url, timeout=config.PD_REQUEST_TIMEOUT())

"""Configuration helpers — read from environment variables."""

from __future__ import annotations

import os


def get_env(name: str, default: str | None = None) -> str:
    """Get an environment variable, raising if missing and no default."""
    value = os.environ.get(name, default)
    if value is None:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


PD_CLIENT_PORT = 2379

# PD endpoint per cluster; {cluster} and {namespace} are filled in.
PD_URL_TEMPLATE = lambda: get_env("PD_URL_TEMPLATE", f"http://{{cluster}}-pd.{{namespace}}:{PD_CLIENT_PORT}")
PD_REQUEST_TIMEOUT = lambda: float(get_env("PD_REQUEST_TIMEOUT", "5"))
KUBE_IN_CLUSTER = lambda: get_env("KUBE_IN_CLUSTER", "false").lower() == "true"

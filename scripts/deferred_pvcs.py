#!/usr/bin/env python3
"""List PD PVCs waiting for deferred deletion, and rescue one if asked.

A PVC marked by a scale-in is deleted by the next scale-out at its ordinal.
Rescuing it clears the marker so the next scale-out reuses the old data.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect or rescue PD PVCs marked for deferred deletion")
    parser.add_argument("cluster", help="TidbCluster name")
    parser.add_argument(
        "--namespace",
        default=os.environ.get("NAMESPACE", "default"),
        help="Kubernetes namespace (default: $NAMESPACE or 'default')",
    )
    parser.add_argument(
        "--rescue",
        type=int,
        metavar="ORDINAL",
        help="Clear the deferred-deletion marker on the PVCs of this ordinal",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be rescued without writing to the API server",
    )
    args = parser.parse_args()

    from pd_scaler.backends.k8s.kube import KubeStore
    from pd_scaler.core import naming
    from pd_scaler.core.volumes import clear_defer_deleting, defer_deleting_since, list_deferred_pvcs
    from pd_scaler.shared.config import KUBE_IN_CLUSTER

    store = KubeStore(in_cluster=KUBE_IN_CLUSTER())
    deferred = list_deferred_pvcs(args.cluster, args.namespace, store)

    if not deferred:
        print(f"No PD PVCs of {args.namespace}/{args.cluster} are marked for deferred deletion")
    for pvc in deferred:
        labels = pvc["metadata"].get("labels") or {}
        print(
            f"{pvc['metadata']['name']}\tpod={labels.get(naming.LABEL_POD_NAME, '?')}"
            f"\tmarked={defer_deleting_since(pvc)}"
        )

    if args.rescue is None:
        return

    pod_name = naming.ordinal_pod_name(args.cluster, args.rescue)
    targets = [pvc for pvc in deferred if (pvc["metadata"].get("labels") or {}).get(naming.LABEL_POD_NAME) == pod_name]
    if not targets:
        print(f"\nNothing to rescue for {pod_name}")
        return

    for pvc in targets:
        if args.dry_run:
            print(f"Would rescue: {pvc['metadata']['name']}")
            continue
        clear_defer_deleting(pvc, store)
        print(f"Rescued: {pvc['metadata']['name']}")


if __name__ == "__main__":
    main()

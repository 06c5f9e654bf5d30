"""A KRM function that keeps a Kustomization listing the package's resources."""

from __future__ import annotations

import sys
from collections.abc import Iterable

from krmkit.krm import PATH_ANNOTATION, KubeObject, ResourceList, as_main, parse_kube_object

KUSTOMIZE_GROUP = "kustomize.config.k8s.io"
KUSTOMIZE_KIND = "Kustomization"
KUSTOMIZE_NAME = "kustomization"

_TEMPLATE = """
apiVersion: kustomize.config.k8s.io/v1beta1
kind: Kustomization
metadata:
  name: upsert-kustomize-res
resources: []
"""


def _is_kustomization(obj: KubeObject) -> bool:
    return obj.is_group_kind(KUSTOMIZE_GROUP, KUSTOMIZE_KIND)


def _existing_kustomization(rl: ResourceList) -> KubeObject | None:
    return next((item for item in rl.items if _is_kustomization(item)), None)


def _non_local_config(rl: ResourceList) -> list[str]:
    return [
        item.path_annotation()
        for item in rl.items
        if not item.is_local_config() and not _is_kustomization(item)
    ]


def merge_and_remove_duplicates(*args: Iterable[str]) -> list[str]:
    """Concatenate the sequences, keeping the first occurrence of each item."""
    return list(dict.fromkeys(item for seq in args for item in seq))


def run(rl: ResourceList) -> bool:
    """Create or update the Kustomization so it lists every non-local resource."""
    existing = _existing_kustomization(rl)
    if existing is not None:
        current = existing.get_nested("resources") or []
        resources = (
            merge_and_remove_duplicates(current, _non_local_config(rl))
            if current
            else _non_local_config(rl)
        )
        target = existing
    else:
        target = parse_kube_object(_TEMPLATE)
        target.set_annotation(PATH_ANNOTATION, KUSTOMIZE_NAME + ".yaml")
        resources = _non_local_config(rl)
    target.set_nested(resources, "resources")
    rl.upsert_object_to_items(target, True)
    return True


def main(argv: list[str] | None = None) -> int:
    """Run the function on a ResourceList read from standard input."""
    return as_main(run, sys.stdin, sys.stdout)
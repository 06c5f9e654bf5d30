"""Helpers for annotations and finalizers in object metadata."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from krmkit.krm import KubeObject


def add_annotations(obj: KubeObject, annotations: Mapping[str, str]) -> None:
    """Merge the annotations into the object's annotations."""
    current = obj.annotations
    if current is None:
        obj.annotations = dict(annotations)
        return
    current.update(annotations)
    obj.annotations = current


def remove_annotations(obj: KubeObject, *args: str) -> None:
    """Remove the named annotations, if the object has any."""
    current = obj.annotations
    if current is None:
        return
    for key in args:
        current.pop(key, None)
    obj.annotations = current


def add_finalizer(obj: KubeObject, finalizer: str) -> None:
    """Append the finalizer unless it is already present."""
    current = obj.finalizers or []
    if finalizer in current:
        return
    obj.finalizers = [*current, finalizer]


def remove_finalizer(obj: KubeObject, finalizer: str) -> None:
    """Remove the finalizer from the object's metadata."""
    current = obj.finalizers
    if current is None:
        return
    obj.finalizers = remove_string(current, finalizer)


def finalizer_exists(obj: KubeObject, finalizer: str) -> bool:
    return finalizer in (obj.finalizers or [])


def remove_string(items: Iterable[str], value: str) -> list[str]:
    """Return the items without any occurrence of ``value``."""
    return [item for item in items if item != value]
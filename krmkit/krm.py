"""Kubernetes resource model objects and KRM function resource lists."""

from __future__ import annotations

import copy
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import IO, Any

import yaml

PATH_ANNOTATION = "internal.config.kubernetes.io/path"
LEGACY_PATH_ANNOTATION = "config.kubernetes.io/path"
LOCAL_CONFIG_ANNOTATION = "config.kubernetes.io/local-config"
RESOURCE_LIST_API_VERSION = "config.kubernetes.io/v1"
RESOURCE_LIST_KIND = "ResourceList"


class KrmError(Exception):
    """Raised when a KRM object or resource list is malformed."""


@dataclass(frozen=True)
class GroupVersionKind:
    """The group, version and kind that identify a Kubernetes type."""

    group: str = ""
    version: str = ""
    kind: str = ""

    def api_version(self) -> str:
        """Return the apiVersion string, ``group/version`` or just ``version``."""
        return f"{self.group}/{self.version}" if self.group else self.version

    @classmethod
    def from_api_version(cls, api_version: str, kind: str) -> GroupVersionKind:
        group, _, version = api_version.rpartition("/")
        return cls(group=group, version=version, kind=kind)


class KubeObject:
    """A Kubernetes object held as a plain nested mapping."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise KrmError("a Kubernetes object must be a mapping")
        self._data = data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KubeObject):
            return NotImplemented
        return self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"KubeObject({self._data!r})"

    # -- nested field access -------------------------------------------------

    def get_nested(self, *fields: str) -> Any:
        """Return the value at the field path, or None when it is absent."""
        current: Any = self._data
        for name in fields:
            if not isinstance(current, dict):
                raise KrmError(f"field {name!r} is not inside a mapping")
            if name not in current:
                return None
            current = current[name]
        return current

    def set_nested(self, value: Any, *fields: str) -> None:
        """Set the value at the field path, creating mappings on the way."""
        if not fields:
            raise KrmError("a field path must not be empty")
        current = self._data
        for name in fields[:-1]:
            child = current.get(name)
            if child is None:
                child = current[name] = {}
            elif not isinstance(child, dict):
                raise KrmError(f"field {name!r} is not a mapping")
            current = child
        current[fields[-1]] = value

    def remove_nested(self, *fields: str) -> bool:
        """Remove the field at the path; return whether it was present."""
        if not fields:
            raise KrmError("a field path must not be empty")
        parent = self.get_nested(*fields[:-1])
        if not isinstance(parent, dict) or fields[-1] not in parent:
            return False
        del parent[fields[-1]]
        return True

    # -- identity --------------------------------------------------------------

    @property
    def api_version(self) -> str:
        return self.get_nested("apiVersion") or ""

    @api_version.setter
    def api_version(self, value: str) -> None:
        self.set_nested(value, "apiVersion")

    @property
    def kind(self) -> str:
        return self.get_nested("kind") or ""

    @kind.setter
    def kind(self, value: str) -> None:
        self.set_nested(value, "kind")

    @property
    def name(self) -> str:
        return self.get_nested("metadata", "name") or ""

    @name.setter
    def name(self, value: str) -> None:
        self.set_nested(value, "metadata", "name")

    @property
    def namespace(self) -> str:
        return self.get_nested("metadata", "namespace") or ""

    @namespace.setter
    def namespace(self, value: str) -> None:
        self.set_nested(value, "metadata", "namespace")

    @property
    def gvk(self) -> GroupVersionKind:
        return GroupVersionKind.from_api_version(self.api_version, self.kind)

    def is_group_kind(self, group: str, kind: str) -> bool:
        gvk = self.gvk
        return gvk.group == group and gvk.kind == kind

    # -- metadata ----------------------------------------------------------------

    @property
    def annotations(self) -> dict[str, str] | None:
        """The live annotations mapping, or None when there is none."""
        return self.get_nested("metadata", "annotations")

    @annotations.setter
    def annotations(self, value: Mapping[str, str] | None) -> None:
        if value is None:
            self.remove_nested("metadata", "annotations")
        else:
            self.set_nested(dict(value), "metadata", "annotations")

    @property
    def finalizers(self) -> list[str] | None:
        return self.get_nested("metadata", "finalizers")

    @finalizers.setter
    def finalizers(self, value: list[str] | None) -> None:
        if value is None:
            self.remove_nested("metadata", "finalizers")
        else:
            self.set_nested(list(value), "metadata", "finalizers")

    @property
    def deletion_timestamp(self) -> Any:
        return self.get_nested("metadata", "deletionTimestamp")

    @deletion_timestamp.setter
    def deletion_timestamp(self, value: Any) -> None:
        if value is None:
            self.remove_nested("metadata", "deletionTimestamp")
        else:
            self.set_nested(value, "metadata", "deletionTimestamp")

    def get_annotation(self, key: str) -> str:
        """Return the annotation's value, or an empty string when unset."""
        return (self.annotations or {}).get(key, "")

    def set_annotation(self, key: str, value: str) -> None:
        annotations = self.annotations
        if annotations is None:
            self.set_nested({key: value}, "metadata", "annotations")
        else:
            annotations[key] = value

    def is_local_config(self) -> bool:
        return self.get_annotation(LOCAL_CONFIG_ANNOTATION) not in ("", "false")

    def path_annotation(self) -> str:
        return self.get_annotation(PATH_ANNOTATION) or self.get_annotation(
            LEGACY_PATH_ANNOTATION
        )

    # -- conversion --------------------------------------------------------------

    def deep_copy(self) -> KubeObject:
        return KubeObject(copy.deepcopy(self._data))

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the underlying mapping."""
        return copy.deepcopy(self._data)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self._data, sort_keys=False, default_flow_style=False)


@dataclass
class Result:
    """A message reported by a KRM function."""

    message: str
    severity: str = "error"

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "severity": self.severity}


@dataclass
class ResourceList:
    """The input and output of a KRM function."""

    items: list[KubeObject] = field(default_factory=list)
    function_config: KubeObject | None = None
    results: list[Result] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(result.severity == "error" for result in self.results)

    def log_result(self, error: BaseException | str) -> None:
        """Record an error as a result of the function run."""
        self.results.append(Result(message=str(error), severity="error"))

    def upsert_object_to_items(
        self, obj: KubeObject | Mapping[str, Any], replace_if_exists: bool = True
    ) -> None:
        """Add the object, or replace an item with the same identity."""
        if not isinstance(obj, KubeObject):
            obj = KubeObject(copy.deepcopy(dict(obj)))
        identity = _identity(obj)
        for index, item in enumerate(self.items):
            if _identity(item) == identity:
                if replace_if_exists:
                    self.items[index] = obj
                return
        self.items.append(obj)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "apiVersion": RESOURCE_LIST_API_VERSION,
            "kind": RESOURCE_LIST_KIND,
            "items": [item.to_dict() for item in self.items],
        }
        if self.function_config is not None:
            data["functionConfig"] = self.function_config.to_dict()
        if self.results:
            data["results"] = [result.to_dict() for result in self.results]
        return data

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)


def _identity(obj: KubeObject) -> tuple[str, str, str, str]:
    return (obj.api_version, obj.kind, obj.namespace, obj.name)


def _load_yaml(text: str | bytes) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise KrmError(f"invalid YAML: {exc}") from exc


def parse_kube_object(text: str | bytes) -> KubeObject:
    """Parse one Kubernetes object from YAML text."""
    data = _load_yaml(text)
    if not isinstance(data, dict):
        raise KrmError("a Kubernetes object must be a mapping")
    return KubeObject(data)


def read_resource_list(text: str | bytes) -> ResourceList:
    """Parse a ResourceList from YAML text."""
    data = _load_yaml(text)
    if not isinstance(data, dict) or data.get("kind") != RESOURCE_LIST_KIND:
        raise KrmError(f"input is not a {RESOURCE_LIST_KIND}")
    raw_items = data.get("items") or []
    if not isinstance(raw_items, list):
        raise KrmError("items of a ResourceList must be a list")
    items = [KubeObject(item) for item in raw_items]
    raw_config = data.get("functionConfig")
    function_config = KubeObject(raw_config) if raw_config is not None else None
    results = [
        Result(message=str(r.get("message", "")), severity=str(r.get("severity", "error")))
        for r in data.get("results") or []
        if isinstance(r, dict)
    ]
    return ResourceList(items=items, function_config=function_config, results=results)


def as_main(
    processor: Callable[[ResourceList], bool],
    instream: IO[str] | None = None,
    outstream: IO[str] | None = None,
) -> int:
    """Read a ResourceList, run the processor on it and write it back.

    Returns the exit status: 0 on success, 1 on failure.
    """
    instream = sys.stdin if instream is None else instream
    outstream = sys.stdout if outstream is None else outstream
    try:
        rl = read_resource_list(instream.read())
    except KrmError as exc:
        print(exc, file=sys.stderr)
        return 1
    try:
        ok = processor(rl)
    except Exception as exc:  # the function's failure is reported as a result
        rl.log_result(exc)
        ok = False
    outstream.write(rl.to_yaml())
    return 0 if ok and not rl.has_errors else 1


def get_unstructured_from_gvk(gvk: GroupVersionKind) -> KubeObject:
    """Return an empty object carrying the apiVersion and kind of ``gvk``."""
    return KubeObject({"apiVersion": gvk.api_version(), "kind": gvk.kind})


def was_deleted(obj: KubeObject) -> bool:
    """Return whether the object carries a deletion timestamp."""
    return bool(obj.deletion_timestamp)
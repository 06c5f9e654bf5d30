"""A KRM function that generates a ConfigMap from its function config."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any

from krmkit.gotemplate import Template
from krmkit.krm import PATH_ANNOTATION, KubeObject, ResourceList, as_main


class GenConfigMapError(ValueError):
    """Raised when the function config is invalid or generation fails."""


@dataclass
class GenConfigMapEntry:
    """One data entry: a literal value or a template rendered with params."""

    type: str = ""
    key: str = ""
    value: str = ""

    def generate(self, params: dict[str, str] | None, data: dict[str, str]) -> None:
        """Store this entry's value under its key in ``data``."""
        if self.type == "gotmpl":
            template = Template(self.key).parse(self.value)
            data[self.key] = template.execute(params or {})
        else:
            data[self.key] = self.value


@dataclass
class GenConfigMap:
    """The function config: ConfigMap metadata, template params and entries."""

    config_map_metadata: dict[str, Any] = field(default_factory=dict)
    params: dict[str, str] | None = None
    data: list[GenConfigMapEntry] = field(default_factory=list)

    def validate(self) -> None:
        for index, entry in enumerate(self.data):
            if not entry.key:
                raise GenConfigMapError(f"data entry {index}, key must not be empty")


def _field(mapping: dict[str, Any], name: str) -> Any:
    lowered = name.lower()
    for key, value in mapping.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def config_from_object(obj: KubeObject) -> GenConfigMap:
    """Read a GenConfigMap from a function config object."""
    raw = obj.to_dict()
    metadata = _field(raw, "configMapMetadata") or {}
    params = _field(raw, "params")
    entries = _field(raw, "data") or []
    if not isinstance(metadata, dict):
        raise GenConfigMapError("configMapMetadata must be a mapping")
    if params is not None and not isinstance(params, dict):
        raise GenConfigMapError("params must be a mapping")
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise GenConfigMapError("data must be a list of mappings")
    return GenConfigMap(
        config_map_metadata=metadata,
        params={str(k): str(v) for k, v in params.items()} if params is not None else None,
        data=[
            GenConfigMapEntry(
                type=str(_field(e, "type") or ""),
                key=str(_field(e, "key") or ""),
                value=str(_field(e, "value") or ""),
            )
            for e in entries
        ],
    )


def process(rl: ResourceList) -> bool:
    """Generate the ConfigMap and upsert it into the resource list."""
    if rl.function_config is None:
        raise GenConfigMapError("function config is missing")
    config = config_from_object(rl.function_config)
    name = config.config_map_metadata.get("name") or rl.function_config.name
    config.validate()

    cm = KubeObject({"apiVersion": "v1", "kind": "ConfigMap"})
    metadata = dict(config.config_map_metadata)
    metadata.pop("creationTimestamp", None)
    cm.set_nested(metadata, "metadata")
    cm.name = name
    cm.set_annotation(PATH_ANNOTATION, f"_gen_configmap_{name}.yaml")

    data: dict[str, str] = {}
    for index, entry in enumerate(config.data):
        try:
            entry.generate(config.params, data)
        except Exception as exc:
            raise GenConfigMapError(f"data entry {index} generate error: {exc}") from exc
    if data:
        cm.set_nested(data, "data")
    rl.upsert_object_to_items(cm, True)
    return True


def main(argv: list[str] | None = None) -> int:
    """Run the function on a ResourceList read from standard input."""
    return as_main(process, sys.stdin, sys.stdout)
"""Conversion and inspection of package conditions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass
class KptCondition:
    """A condition as recorded in a Kptfile."""

    type: str
    status: str = ""
    reason: str = ""
    message: str = ""


@dataclass
class PorchCondition:
    """A condition as reported on a package revision."""

    type: str
    status: str = ""
    reason: str = ""
    message: str = ""


def get_porch_conditions(conditions: Iterable[KptCondition]) -> list[PorchCondition]:
    """Convert Kptfile conditions to package revision conditions."""
    return [
        PorchCondition(type=c.type, status=c.status, reason=c.reason, message=c.message)
        for c in conditions
    ]


def has_specific_type_conditions(
    conditions: Iterable[PorchCondition], condition_type: str
) -> bool:
    """Return whether any condition's type starts with ``condition_type`` and a dot."""
    prefix = condition_type + "."
    return any(c.type.startswith(prefix) for c in conditions)
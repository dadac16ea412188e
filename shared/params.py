"""Declarative parameter schema.

A processor's parameter contract is a list of ParamDef objects. ParamSchema
wraps the list and derives the plain dicts callers pass around
(default_params, bypass_params, PARAM_RANGES, PARAM_SECTIONS) and cleans up
raw dicts coming from presets or the command line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

log = logging.getLogger(__name__)


class ParamType(Enum):
    FLOAT = "float"
    BOOL = "bool"


@dataclass
class ParamDef:
    key: str
    type: ParamType
    default: Any
    section: str
    label: str = ""
    unit: str = ""
    bypass: Any = None          # if None, uses default
    range: tuple | None = None  # (min, max) for continuous params
    step: float | None = None   # knob resolution, display only


class ParamSchema:
    """Derives the params dict structures from a declarative param list."""

    def __init__(self, params: list[ParamDef]):
        self._params = params
        self._by_key: dict[str, ParamDef] = {p.key: p for p in params}

    def default_params(self) -> dict:
        return {p.key: p.default for p in self._params}

    def bypass_params(self) -> dict:
        return {p.key: p.default if p.bypass is None else p.bypass
                for p in self._params}

    def param_ranges(self) -> dict[str, tuple]:
        """PARAM_RANGES — continuous params only."""
        return {p.key: p.range for p in self._params
                if p.range is not None and p.type == ParamType.FLOAT}

    def param_sections(self) -> dict[str, list[str]]:
        """PARAM_SECTIONS — section name -> list of param keys."""
        sections: dict[str, list[str]] = {}
        for p in self._params:
            sections.setdefault(p.section, []).append(p.key)
        return sections

    def validate_and_clamp(self, raw: dict) -> dict:
        """Validate and clamp a raw params dict (e.g. from a preset file).

        Unknown keys are dropped. Values are type-cast and clamped to range;
        values that cannot be cast are dropped. Missing keys are not filled.
        """
        result = {}
        for key, value in raw.items():
            p = self._by_key.get(key)
            if p is None:
                log.debug("ignoring unknown param %r", key)
                continue

            if p.type == ParamType.BOOL:
                try:
                    result[key] = 1 if int(value) else 0
                except (TypeError, ValueError):
                    log.warning("param %r: cannot read %r as a switch", key, value)
                continue

            try:
                v = float(value)
            except (TypeError, ValueError):
                log.warning("param %r: cannot read %r as a number", key, value)
                continue
            if p.range:
                lo, hi = p.range
                clamped = max(lo, min(hi, v))
                if clamped != v:
                    log.warning("param %r clamped %g -> %g", key, v, clamped)
                v = clamped
            result[key] = v

        return result

    def __iter__(self):
        return iter(self._params)

    def __len__(self):
        return len(self._params)

"""
Schema — Pydantic models for rjs_filter inputs and outputs.

Inputs:
  FilterConfigModel   — JSON filter configuration (CLI file / request body).
  ShimDescriptor      — one shim entry, normalized form.
  ModuleDescriptor    — one entry of the ``modules`` build option.

Outputs:
  OptimizeReceipt     — record of one successful optimizer run.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from rjs_filter import FILTER_VERSION, PACKAGE_NAME, SCHEMA_VERSION


# ── Shim ─────────────────────────────────────────────────────────────────────

class ShimDescriptor(BaseModel):
    """How r.js should treat a non-AMD script."""
    model_config = ConfigDict(extra="allow")

    deps: List[str] = Field(default_factory=list)
    exports: Optional[str] = None
    init: Optional[str] = None

    @classmethod
    def normalize(cls, value: Union[List[str], Dict[str, Any]]) -> Dict[str, Any]:
        """
        Normalize a shim entry to its mapping form.

        A bare dependency list is shorthand for ``{"deps": [...]}``.
        Unset optional keys are omitted from the result.
        """
        if isinstance(value, (list, tuple)):
            value = {"deps": list(value)}
        return cls.model_validate(value).model_dump(exclude_none=True)


# ── Modules (multi-output builds) ────────────────────────────────────────────

class ModuleDescriptor(BaseModel):
    """One output of a multi-output build; extra keys override the profile."""
    model_config = ConfigDict(extra="allow")

    name: str
    include: Optional[List[str]] = None
    exclude: Optional[List[str]] = None


# ── Filter configuration file ────────────────────────────────────────────────

class FilterConfigModel(BaseModel):
    """Serializable shape of a FilterConfig."""
    exclude: List[str] = Field(default_factory=list)
    external: List[str] = Field(default_factory=list)
    paths: Dict[str, str] = Field(default_factory=dict)
    shim: Dict[str, Union[List[str], Dict[str, Any]]] = Field(default_factory=dict)
    options: Dict[str, Any] = Field(default_factory=dict)

    def validated_modules(self) -> List[ModuleDescriptor]:
        """Parse ``options["modules"]``, raising ValidationError on bad entries."""
        return [
            ModuleDescriptor.model_validate(m)
            for m in self.options.get("modules") or []
        ]


# ── Receipt ──────────────────────────────────────────────────────────────────

class OptimizeReceipt(BaseModel):
    """One successful optimizer run."""
    package_name: str = PACKAGE_NAME
    filter_version: str = FILTER_VERSION
    schema_version: str = SCHEMA_VERSION
    profile_id: str

    entry_name: str
    source_path: Optional[str] = None
    command: List[str]
    exit_code: int = 0

    input_sha256: str
    input_size_bytes: int
    output_sha256: str
    output_size_bytes: int

    duration_ms: int

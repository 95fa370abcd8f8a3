"""
FilterConfig — configuration accumulated by the caller across many dumps.

Mutators do no validation beyond shape; repeated registration of the
same alias or option is last-write-wins.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from rjs_filter.core.asset import AssetLike, source_location
from rjs_filter.io.schema import FilterConfigModel

logger = logging.getLogger(__name__)

ShimEntry = Union[List[str], Dict[str, Any]]


@dataclass
class FilterConfig:
    exclude: List[str] = field(default_factory=list)
    external: List[str] = field(default_factory=list)
    paths: Dict[str, str] = field(default_factory=dict)
    shim: Dict[str, ShimEntry] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FilterConfig:
        """Build a config from its JSON shape (see FilterConfigModel)."""
        model = FilterConfigModel.model_validate(data)
        model.validated_modules()  # rejects modules entries without a name
        config = cls()
        for module in model.exclude:
            config.add_exclude(module)
        for module in model.external:
            config.add_external(module)
        for alias, location in model.paths.items():
            config.add_path(alias, location)
        config.set_shim(model.shim)
        for name, value in model.options.items():
            config.add_option(name, value)
        return config

    # ── Mutators ─────────────────────────────────────────────────────────

    def add_exclude(self, module: str) -> None:
        self.exclude.append(module)

    def add_external(self, module: str) -> None:
        """Treat *module* as already loaded; r.js maps it to ``empty:``."""
        self.external.append(module)

    def add_option(self, name: str, value: Any) -> None:
        self.options[name] = value

    def add_path(self, module: str, path: str) -> None:
        self.paths[module] = path

    def set_shim(self, shim: Mapping[str, ShimEntry]) -> None:
        """Replace the whole shim config."""
        self.shim = dict(shim)

    # ── Multi-output builds ──────────────────────────────────────────────

    def has_modules(self) -> bool:
        """True if the options declare several output modules instead of one."""
        return self.options.get("modules") is not None

    def modules(self) -> List[Mapping[str, Any]]:
        """``modules`` entries that carry a name; nameless entries are skipped."""
        return [
            m for m in self.options.get("modules") or []
            if isinstance(m, Mapping) and m.get("name")
        ]

    def module_names(self) -> List[str]:
        return [m["name"] for m in self.modules()]

    def get_name_for_asset(self, asset: AssetLike, base_url: str) -> Optional[str]:
        """
        Return the ``modules`` entry name the asset belongs to, or None.

        The path alias whose resolved target covers the asset's source
        location most specifically is substituted back into each module
        name; the first module whose resolved name covers the location
        wins.  A target covers a location when it is the location itself,
        the location minus its ``.js`` suffix, or a parent directory of
        it.  Relative locations resolve against *base_url*.
        """
        location = source_location(asset)
        alias = self._match_alias(location, base_url)

        for module in self.modules():
            name = module["name"]
            if alias is not None and (name == alias or name.startswith(alias + "/")):
                candidate = self.paths[alias] + name[len(alias):]
            else:
                candidate = name
            real_name = _resolve(candidate, base_url)

            if _covers(real_name, location):
                logger.debug("asset %s -> module %s (alias=%s)", location, name, alias)
                return name

        return None

    def _match_alias(self, location: str, base_url: str) -> Optional[str]:
        best: Optional[Tuple[int, str]] = None
        for alias, path in self.paths.items():
            target = _resolve(path, base_url)
            if _covers(target, location) and (best is None or len(target) > best[0]):
                best = (len(target), alias)
        return best[1] if best else None


def _resolve(path: str, base_url: str) -> str:
    # os.path.join keeps *path* when it is already absolute
    return os.path.realpath(os.path.join(base_url, path))


def _covers(target: str, location: str) -> bool:
    return (
        location == target
        or location == target + ".js"
        or location.startswith(target.rstrip(os.sep) + os.sep)
    )

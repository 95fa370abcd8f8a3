"""
Asset — the pipeline-side collaborator the filter reads from and writes to.

The pipeline owns storage and caching; the filter only needs the content
and enough identity to locate the source on disk.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable


class AssetLike(Protocol):
    content: str
    source_root: Optional[str]
    source_path: Optional[str]


@runtime_checkable
class AssetFilter(Protocol):
    """Two-operation filter capability consumed by the asset pipeline."""

    def filter_load(self, asset: AssetLike) -> None: ...

    def filter_dump(self, asset: AssetLike) -> None: ...


@dataclass
class StringAsset:
    """In-memory asset with optional source identity."""
    content: str
    source_root: Optional[str] = None
    source_path: Optional[str] = None


@dataclass
class FileAsset:
    """Asset loaded from ``source_root/source_path``."""
    source_root: str
    source_path: str
    content: str = ""

    @classmethod
    def load(cls, source_root: str, source_path: str) -> FileAsset:
        path = Path(source_root) / source_path
        return cls(
            source_root=source_root,
            source_path=source_path,
            content=path.read_text(encoding="utf-8"),
        )


def source_location(asset: AssetLike) -> str:
    """Absolute, symlink-resolved location of the asset's source file."""
    return os.path.realpath(
        os.path.join(asset.source_root or "", asset.source_path or "")
    )

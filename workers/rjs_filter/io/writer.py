"""
Writer — serialize the build profile and the run receipt.

r.js loads its profile with ``eval``, so the file holds a parenthesized
JavaScript expression rather than bare JSON:

    ({"baseUrl":"...","paths":{...},"name":"...","out":"..."})
"""
import json
from pathlib import Path
from typing import Any, Dict

from rjs_filter.io.schema import OptimizeReceipt


def serialize_build_profile(content: Dict[str, Any]) -> str:
    """Render *content* as ``(`` + compact JSON + ``)``."""
    return "(" + json.dumps(content, separators=(",", ":")) + ")"


def write_build_profile(content: Dict[str, Any], path: Path) -> Path:
    path.write_text(serialize_build_profile(content), encoding="utf-8")
    return path


def write_receipt(receipt: OptimizeReceipt, path: Path) -> Path:
    """
    Write the receipt as pretty JSON to *path*.

    Creates the parent directory if it does not exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            receipt.model_dump(mode="json"),
            indent=2,
            sort_keys=True,
        )
        + "\n"
    )
    return path

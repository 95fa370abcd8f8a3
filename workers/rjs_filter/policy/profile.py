"""
Profile — how the optimizer is invoked.

The profile carries the constructor-level knobs (interpreter, optimizer
script, base URL) so that the filter itself holds no environment
opinions.  Pointing at another r.js build is a profile change, not a
code change.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class RJsProfile:
    """Invocation profile for the r.js optimizer."""

    # Identity
    profile_id: str

    # Optimizer invocation
    r_path: str
    base_url: str  # named after the r.js option; usually a filesystem path
    node_path: str = ""  # empty: run r_path directly as an executable

    # Temp artifacts (None: system temp dir)
    temp_dir: Optional[str] = None

    def command(self) -> List[str]:
        """Argv prefix that launches the optimizer, without ``-o <profile>``."""
        if self.node_path:
            return [self.node_path, self.r_path]
        return [self.r_path]

    @classmethod
    def v1(
        cls,
        r_path: str,
        base_url: str,
        node_path: str = "",
        temp_dir: Optional[str] = None,
    ) -> RJsProfile:
        """The v1 profile: r.js under node.js."""
        return cls(
            profile_id="requirejs-rjs-node",
            r_path=r_path,
            base_url=base_url,
            node_path=node_path,
            temp_dir=temp_dir,
        )

"""
Test fixtures for rjs_filter.

Provides a small on-disk AMD source tree, a recording command runner
(no node.js required) and stand-in r.js scripts that run under the
current Python interpreter.
"""
from __future__ import annotations

import json
import sys
import textwrap
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from rjs_filter.core.process import ProcessResult
from rjs_filter.policy.profile import RJsProfile


# ── Sample sources ───────────────────────────────────────────────────────────

MAIN_JS = textwrap.dedent("""\
    define(['jquery', 'app/util'], function ($, util) {
        util.start($);
    });
""")

UTIL_JS = textwrap.dedent("""\
    define([], function () {
        return { start: function ($) { $('body').show(); } };
    });
""")

ADMIN_JS = textwrap.dedent("""\
    define(['app/util'], function (util) {
        util.start(null);
    });
""")


# ── Stand-in r.js scripts (run with sys.executable) ──────────────────────────

# Copies the entry-point file to the output: a no-op optimizer.
COPY_OPTIMIZER = textwrap.dedent("""\
    import json
    import shutil
    import sys

    profile_path = sys.argv[sys.argv.index("-o") + 1]
    with open(profile_path, encoding="utf-8") as fp:
        text = fp.read()
    profile = json.loads(text[1:-1])
    shutil.copyfile(profile["paths"][profile["name"]], profile["out"])
""")

FAILING_OPTIMIZER = textwrap.dedent("""\
    import sys

    print("Tracing dependencies for: main")
    print("Error: ENOENT, no such file or directory 'app/missing.js'", file=sys.stderr)
    sys.exit(3)
""")

NOT_FOUND_OPTIMIZER = textwrap.dedent("""\
    import sys

    print("env: node: No such file or directory", file=sys.stderr)
    sys.exit(127)
""")


# Latin-1 bytes on the streams, as r.js prints raw file names.
NOISY_FAILING_OPTIMIZER = textwrap.dedent("""\
    import sys

    sys.stderr.buffer.write(b"Error in \\xff\\xfe file\\n")
    sys.exit(1)
""")

NOISY_COPY_OPTIMIZER = COPY_OPTIMIZER + textwrap.dedent("""\
    sys.stdout.buffer.write(b"Tracing \\xe9\\n")
""")


def read_build_profile(path: Path) -> Dict[str, Any]:
    """Parse a profile file written by the filter."""
    text = path.read_text(encoding="utf-8")
    if not (text.startswith("(") and text.endswith(")")):
        raise ValueError(f"Not a parenthesized build profile: {path}")
    return json.loads(text[1:-1])


def write_optimizer(tmp_dir: Path, body: str, filename: str = "r.py") -> Path:
    """Write a stand-in r.js script and return its path."""
    path = tmp_dir / filename
    path.write_text(body, encoding="utf-8")
    return path


# ── Recording runner ─────────────────────────────────────────────────────────

class RecordingRunner:
    """
    CommandRunner double.

    Records each argv and the parsed build profile, writes *output* to the
    profile's ``out`` file (unless *delete_output*), then reports
    *returncode*.
    """

    def __init__(
        self,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        output: str = "/* optimized */",
        delete_output: bool = False,
        exc: Optional[Exception] = None,
    ):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.output = output
        self.delete_output = delete_output
        self.exc = exc
        self.calls: List[List[str]] = []
        self.profiles: List[Dict[str, Any]] = []
        self.profile_texts: List[str] = []

    def run(self, args: List[str]) -> ProcessResult:
        self.calls.append(list(args))
        profile_path = Path(args[args.index("-o") + 1])
        self.profile_texts.append(profile_path.read_text(encoding="utf-8"))
        profile = read_build_profile(profile_path)
        self.profiles.append(profile)

        if self.exc is not None:
            raise self.exc

        out = Path(profile["out"])
        if self.delete_output:
            out.unlink()
        else:
            out.write_text(self.output, encoding="utf-8")

        return ProcessResult(self.returncode, self.stdout, self.stderr)


# ── Pytest fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def js_root(tmp_path: Path) -> Path:
    """AMD source tree: app/main.js, app/util.js, app/admin/index.js."""
    root = tmp_path / "js"
    (root / "app" / "admin").mkdir(parents=True)
    (root / "vendor").mkdir()
    (root / "app" / "main.js").write_text(MAIN_JS, encoding="utf-8")
    (root / "app" / "util.js").write_text(UTIL_JS, encoding="utf-8")
    (root / "app" / "admin" / "index.js").write_text(ADMIN_JS, encoding="utf-8")
    (root / "vendor" / "jquery.js").write_text("/* jquery */\n", encoding="utf-8")
    return root


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Directory the filter creates its temp files in."""
    d = tmp_path / "tmp"
    d.mkdir()
    return d


@pytest.fixture
def profile(js_root: Path, temp_dir: Path, tmp_path: Path) -> RJsProfile:
    """Profile running the copy optimizer under the current interpreter."""
    script = write_optimizer(tmp_path, COPY_OPTIMIZER)
    return RJsProfile.v1(
        r_path=str(script),
        base_url=str(js_root),
        node_path=sys.executable,
        temp_dir=str(temp_dir),
    )


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    """A temp-input-like file holding MAIN_JS."""
    path = tmp_path / "input_main"
    path.write_text(MAIN_JS, encoding="utf-8")
    return path

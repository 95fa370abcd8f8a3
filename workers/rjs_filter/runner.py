"""
Runner — invoke r.js on one asset and recover the optimized output.

``RJsFilter`` is the pipeline-facing filter (``filter_load`` is a no-op,
``filter_dump`` rewrites the asset).  ``run_rjs_optimize`` wraps it for
the CLI and the API endpoint and returns a receipt.

Dump sequence:
  1. Write the asset content to a temp input file.
  2. Build the profile document and write it to a temp profile file.
  3. Run ``[node] r.js -o <profile>`` and wait for it.
  4. Remove the input file.
  5. Non-zero exit: remove output + profile, raise (127 is special-cased).
  6. Read the output into the asset, remove output + profile.

Every temp file is removed on every exit path.
"""
from __future__ import annotations

import argparse
import hashlib
import json
import logging
import os
import sys
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from rjs_filter.core.asset import AssetLike, StringAsset
from rjs_filter.core.build_profile import make_build_profile
from rjs_filter.core.config import FilterConfig
from rjs_filter.core.process import EXIT_NOT_FOUND, CommandRunner, ProcessRunner
from rjs_filter.errors import (
    InterpreterNotFoundError,
    OptimizerFailureError,
    OutputMissingError,
    RJsFilterError,
)
from rjs_filter.io.schema import OptimizeReceipt
from rjs_filter.io.writer import write_build_profile, write_receipt
from rjs_filter.policy.profile import RJsProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DumpOutcome:
    """What a successful dump ran and built."""
    entry_name: str
    command: List[str]
    exit_code: int


def _remove_files(*paths: Optional[str]) -> None:
    for path in paths:
        if path is not None and os.path.exists(path):
            os.unlink(path)
            logger.debug("removed temp file %s", path)


class RJsFilter:
    """r.js filter for the asset pipeline."""

    def __init__(
        self,
        profile: RJsProfile,
        config: FilterConfig | None = None,
        runner: CommandRunner | None = None,
    ):
        self.profile = profile
        self.config = config if config is not None else FilterConfig()
        self.runner = runner if runner is not None else ProcessRunner()

    def filter_load(self, asset: AssetLike) -> None:
        pass

    def filter_dump(self, asset: AssetLike) -> None:
        self.dump(asset)

    def dump(self, asset: AssetLike) -> DumpOutcome:
        """
        Optimize *asset* in place.

        Raises
        ------
        InterpreterNotFoundError
            r.js exited with 127.
        OptimizerFailureError
            r.js exited with any other non-zero code.
        OutputMissingError
            r.js exited 0 without leaving an output file.
        UnresolvedModuleError
            Multi-output build and the asset matches no module.
        """
        input_path = self._mktemp("input")
        output_path = None
        profile_path = None

        try:
            Path(input_path).write_text(asset.content, encoding="utf-8")
            output_path = self._mktemp("output")
            profile_path = self._mktemp("build_profile")
            content = make_build_profile(
                input_path, output_path, asset, self.config, self.profile,
            )
            write_build_profile(content, Path(profile_path))
        except Exception:
            _remove_files(input_path, output_path, profile_path)
            raise

        command = self.profile.command() + ["-o", profile_path]
        logger.info("Running r.js: %s", " ".join(command))

        try:
            result = self.runner.run(command)
        except Exception:
            _remove_files(output_path, profile_path)
            raise
        finally:
            _remove_files(input_path)

        if result.returncode != 0:
            _remove_files(output_path, profile_path)

            if result.returncode == EXIT_NOT_FOUND:
                logger.error("r.js interpreter not found: %s", command[0])
                raise InterpreterNotFoundError(command)

            logger.error(
                "r.js failed (exit=%d) for %s: %s",
                result.returncode, asset.source_path, result.stderr.strip(),
            )
            raise OptimizerFailureError(
                command,
                result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                input=asset.content,
            )

        if not os.path.exists(output_path):
            _remove_files(profile_path)
            raise OutputMissingError(output_path)

        try:
            asset.content = Path(output_path).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise OptimizerFailureError(
                command,
                result.returncode,
                stdout=result.stdout,
                stderr=f"Output is not valid UTF-8: {e}",
                input=asset.content,
            ) from e
        finally:
            _remove_files(output_path, profile_path)

        return DumpOutcome(
            entry_name=content["name"],
            command=command,
            exit_code=result.returncode,
        )

    def _mktemp(self, prefix: str) -> str:
        fd, path = tempfile.mkstemp(prefix=prefix, dir=self.profile.temp_dir)
        os.close(fd)
        return path


# ── Public API ───────────────────────────────────────────────────────────────

def run_rjs_optimize(
    source: str,
    profile: RJsProfile,
    config: FilterConfig | None = None,
    source_root: str | None = None,
    source_path: str | None = None,
    output_path: Path | None = None,
    receipt_path: Path | None = None,
    runner: CommandRunner | None = None,
) -> Tuple[str, OptimizeReceipt]:
    """
    Optimize *source* with r.js.

    Parameters
    ----------
    source : str
        Raw JavaScript content.
    profile : RJsProfile
        Invocation profile.
    config : FilterConfig, optional
        Filter configuration. Defaults to an empty config.
    source_root, source_path : str, optional
        Asset identity; required for multi-output builds.
    output_path : Path, optional
        Where to write the optimized content. Not written if None.
    receipt_path : Path, optional
        Where to write the JSON receipt. Not written if None.

    Returns
    -------
    (optimized content, OptimizeReceipt)
    """
    asset = StringAsset(source, source_root=source_root, source_path=source_path)
    rjs = RJsFilter(profile, config, runner)

    rjs.filter_load(asset)
    started = time.monotonic()
    outcome = rjs.dump(asset)
    duration_ms = int((time.monotonic() - started) * 1000)

    source_bytes = source.encode("utf-8")
    output_bytes = asset.content.encode("utf-8")
    receipt = OptimizeReceipt(
        profile_id=profile.profile_id,
        entry_name=outcome.entry_name,
        source_path=source_path,
        command=outcome.command,
        exit_code=outcome.exit_code,
        input_sha256=hashlib.sha256(source_bytes).hexdigest(),
        input_size_bytes=len(source_bytes),
        output_sha256=hashlib.sha256(output_bytes).hexdigest(),
        output_size_bytes=len(output_bytes),
        duration_ms=duration_ms,
    )
    logger.info(
        "r.js optimized %s: %d -> %d bytes in %d ms",
        source_path or outcome.entry_name,
        receipt.input_size_bytes, receipt.output_size_bytes, duration_ms,
    )

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(asset.content, encoding="utf-8")
    if receipt_path is not None:
        write_receipt(receipt, receipt_path)

    return asset.content, receipt


# ── CLI ──────────────────────────────────────────────────────────────────────

def main(argv: List[str] | None = None):
    """CLI entry point for rjs_filter."""
    parser = argparse.ArgumentParser(
        description="rjs_filter — optimize a JavaScript asset with r.js",
    )
    parser.add_argument(
        "input",
        type=Path,
        help="JavaScript file to optimize",
    )
    parser.add_argument(
        "--r-js",
        required=True,
        help="Path to r.js",
    )
    parser.add_argument(
        "--base-url",
        required=True,
        help="r.js baseUrl (usually a filesystem path)",
    )
    parser.add_argument(
        "--node",
        default="",
        help="Path to node.js (omit to run r.js directly)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON filter config (exclude, external, paths, shim, options)",
    )
    parser.add_argument(
        "--source-root",
        default=None,
        help="Asset source root (default: directory of input)",
    )
    parser.add_argument(
        "--source-path",
        default=None,
        help="Asset path relative to the source root (default: input file name)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Write optimized output here instead of stdout",
    )
    parser.add_argument(
        "--receipt",
        type=Path,
        default=None,
        help="Write a JSON run receipt here",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.input.exists():
        logger.error("File not found: %s", args.input)
        sys.exit(1)

    config = None
    if args.config is not None:
        config = FilterConfig.from_mapping(
            json.loads(args.config.read_text(encoding="utf-8"))
        )

    profile = RJsProfile.v1(
        r_path=args.r_js,
        base_url=args.base_url,
        node_path=args.node,
    )

    try:
        content, _ = run_rjs_optimize(
            args.input.read_text(encoding="utf-8"),
            profile,
            config,
            source_root=args.source_root or str(args.input.parent),
            source_path=args.source_path or args.input.name,
            output_path=args.output,
            receipt_path=args.receipt,
        )
    except RJsFilterError as e:
        logger.error("%s", e)
        sys.exit(1)

    if args.output is None:
        sys.stdout.write(content)
    else:
        print(f"Output written to: {args.output}")


if __name__ == "__main__":
    main()

"""
Build profile — synthesize the r.js build profile for one asset.

The document is assembled key by key; later steps overwrite earlier ones:
  1. baseUrl, empty paths, name = entry hash, out.
  2. externals mapped to ``empty:``.
  3. the entry hash mapped to the temp input file.
  4. registered path aliases.
  5. shim (normalized) and exclude.
  6. free-form options; ``insertRequire`` becomes the entry hash.
  7. multi-output builds: name resolved from ``modules``, the matching
     module's keys overlaid, ``modules`` removed.
"""
from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Any, Dict

from rjs_filter.core.asset import AssetLike, source_location
from rjs_filter.core.config import FilterConfig
from rjs_filter.errors import UnresolvedModuleError
from rjs_filter.io.schema import ShimDescriptor
from rjs_filter.policy.profile import RJsProfile

logger = logging.getLogger(__name__)

# @link http://requirejs.org/docs/optimization.html#empty
EMPTY_PATH = "empty:"

# @link https://github.com/jrburke/requirejs/wiki/Upgrading-to-RequireJS-2.0#wiki-delayed
DELAYED_REQUIRE_OPTION = "insertRequire"


def entry_name(input_path: str) -> str:
    """md5 of the input file's bytes; never collides with a real module name."""
    return hashlib.md5(Path(input_path).read_bytes()).hexdigest()


def make_build_profile(
    input_path: str,
    output_path: str,
    asset: AssetLike,
    config: FilterConfig,
    profile: RJsProfile,
) -> Dict[str, Any]:
    """
    Build the r.js profile document for *asset*.

    Parameters
    ----------
    input_path : str
        Temp file holding the asset content.
    output_path : str
        Temp file r.js writes the optimized result to.
    asset : AssetLike
        The asset being optimized (source identity used in multi-output mode).
    config : FilterConfig
        Accumulated filter configuration.
    profile : RJsProfile
        Invocation profile (supplies ``baseUrl``).

    Returns
    -------
    dict
        Ordered profile document, ready for serialization.

    Raises
    ------
    UnresolvedModuleError
        Multi-output mode and no ``modules`` entry matches the asset.
    """
    name = entry_name(input_path)

    content: Dict[str, Any] = {
        "baseUrl": profile.base_url,
        "paths": {},
        "name": name,
        "out": output_path,
    }

    for external in config.external:
        content["paths"][external] = EMPTY_PATH

    content["paths"][name] = input_path

    for module, location in config.paths.items():
        content["paths"][module] = location

    content["shim"] = {
        module: ShimDescriptor.normalize(entry)
        for module, entry in config.shim.items()
    }
    content["exclude"] = list(config.exclude)

    for option, value in config.options.items():
        if option == DELAYED_REQUIRE_OPTION:
            value = name
        content[option] = value

    if config.has_modules():
        content["name"] = config.get_name_for_asset(asset, profile.base_url)
        if content["name"] is None:
            raise UnresolvedModuleError(source_location(asset), config.module_names())

        for module in config.modules():
            if module["name"] == content["name"]:
                for key, value in module.items():
                    content[key] = value

        del content["modules"]

    logger.debug("build profile for %s: name=%s paths=%d",
                 asset.source_path, content["name"], len(content["paths"]))
    return content

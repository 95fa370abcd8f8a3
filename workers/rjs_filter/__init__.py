"""
rjs_filter — r.js (RequireJS optimizer) bridge for the asset pipeline.

Writes a build profile for one asset, runs the optimizer as a subprocess
and swaps the asset content for the optimized output.
"""

__version__ = "1.0.0"
FILTER_VERSION = "v1"
PACKAGE_NAME = "rjs_filter"
SCHEMA_VERSION = "1.0"

"""
r.js Router
Optimize a single JavaScript asset with the RequireJS optimizer.

The caller supplies the raw source, its identity under the asset root and
the filter configuration; the response carries the optimized content and
a run receipt.

Internal endpoint: path aliases may point anywhere the server can read.
Options that relocate output or the resolution root are rejected.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, ValidationError, field_validator

from app.config import settings
from rjs_filter.core.config import FilterConfig  # type: ignore
from rjs_filter.errors import (  # type: ignore
    InterpreterNotFoundError,
    OptimizerFailureError,
    OutputMissingError,
    UnresolvedModuleError,
)
from rjs_filter.io.schema import FilterConfigModel, OptimizeReceipt  # type: ignore
from rjs_filter.policy.profile import RJsProfile  # type: ignore
from rjs_filter.runner import run_rjs_optimize  # type: ignore

logger = logging.getLogger(__name__)

# Profile keys that locate output or resolution roots; owned by the server.
RESERVED_OPTIONS = frozenset({"out", "dir", "appDir", "baseUrl", "mainConfigFile"})


# =============================================================================
# Request/Response Models
# =============================================================================

class OptimizeRequest(BaseModel):
    """Request to optimize one asset."""
    content: str = Field(..., description="Raw JavaScript source")
    source_root: Optional[str] = Field(
        None,
        description="Asset source root (needed for multi-output builds)",
    )
    source_path: Optional[str] = Field(
        None,
        description="Asset path relative to source_root",
    )
    config: FilterConfigModel = Field(default_factory=FilterConfigModel)

    @field_validator("config")
    @classmethod
    def reject_reserved_options(cls, config: FilterConfigModel) -> FilterConfigModel:
        overrides = [config.options]
        overrides += [m for m in config.options.get("modules") or [] if isinstance(m, dict)]
        for override in overrides:
            reserved = sorted(RESERVED_OPTIONS.intersection(override))
            if reserved:
                raise ValueError(f"options not allowed over HTTP: {', '.join(reserved)}")
        return config


class OptimizeResponse(BaseModel):
    """Optimized content plus receipt."""
    content: str
    receipt: OptimizeReceipt


def get_profile() -> RJsProfile:
    return RJsProfile.v1(
        r_path=settings.RJS_R_PATH,
        base_url=settings.RJS_BASE_URL,
        node_path=settings.RJS_NODE_PATH,
        temp_dir=settings.RJS_TEMP_DIR,
    )


# =============================================================================
# Router
# =============================================================================

router = APIRouter()


@router.post(
    "/optimize",
    response_model=OptimizeResponse,
    status_code=status.HTTP_200_OK,
    summary="Optimize a JavaScript asset with r.js",
)
def optimize_endpoint(
    request: OptimizeRequest,
    profile: RJsProfile = Depends(get_profile),
):
    """
    Run r.js on the submitted source.

    Sync route: FastAPI runs it in the thread pool, so the blocking
    subprocess does not stall the event loop.
    """
    try:
        config = FilterConfig.from_mapping(request.config.model_dump())
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False),
        )

    try:
        content, receipt = run_rjs_optimize(
            request.content,
            profile,
            config,
            source_root=request.source_root,
            source_path=request.source_path,
        )
    except UnresolvedModuleError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except OptimizerFailureError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "message": "r.js failed",
                "exit_code": e.exit_code,
                "stdout": e.stdout,
                "stderr": e.stderr,
            },
        )
    except (InterpreterNotFoundError, OutputMissingError) as e:
        logger.error("r.js misconfigured: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    return OptimizeResponse(content=content, receipt=receipt)

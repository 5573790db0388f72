"""FastAPI application exposing SPSS-to-R translation over HTTP.

WHY: Migration tooling (notebooks, editors, CI checks) wants to convert
scripts without shelling out to the CLI. FastAPI provides request
validation and automatic OpenAPI documentation.

HOW: POST /translations runs the pipeline synchronously on the request
body and returns the R script. GET /translators lists the registered
commands; GET /health is a liveness check.

RULES:
- Conversion failures (ConversionError, translator ValueError) return 422
  with the error message as detail; no partial script is returned
- The sink is never used; output is always returned in the response
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import FastAPI, HTTPException

from spss_converter import __version__
from spss_converter.config import DISPATCH_SUFFIX
from spss_converter.core.errors import ConversionError
from spss_converter.core.pipeline import translate
from spss_converter.server.models import (
    ErrorResponse,
    HealthResponse,
    TranslationRequest,
    TranslationResponse,
    TranslatorInfo,
)
from spss_converter.translators import TRANSLATORS

logger = logging.getLogger(__name__)

app = FastAPI(
    title="SPSS to R Converter API",
    description=(
        "Translate SPSS syntax scripts into equivalent R code using "
        "dplyr or data.table idioms."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.post(
    "/translations",
    response_model=TranslationResponse,
    tags=["translations"],
    summary="Translate an SPSS script",
    description="Translate SPSS syntax into an R script and return it.",
    responses={
        422: {"model": ErrorResponse, "description": "Script cannot be translated"},
    },
)
async def create_translation(request: TranslationRequest) -> TranslationResponse:
    try:
        rsyntax = translate(
            request.script.splitlines(),
            dialect=request.dialect.value,
            nosave=request.nosave,
        )
    except (ConversionError, ValueError) as exc:
        logger.info("Translation rejected: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))
    return TranslationResponse(lines=list(rsyntax), text=rsyntax.to_text())


@app.get(
    "/translators",
    response_model=List[TranslatorInfo],
    tags=["translators"],
    summary="List supported SPSS commands",
    description="Returns every registered translator with its command key and dispatch name.",
)
async def list_translators() -> List[TranslatorInfo]:
    return [
        TranslatorInfo(key=name[: -len(DISPATCH_SUFFIX)], name=name)
        for name in sorted(TRANSLATORS)
    ]


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the spss-api console script."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

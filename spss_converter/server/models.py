"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- OutputDialect values match spss_converter.core.ir.Dialect exactly
"""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class OutputDialect(str, Enum):
    """R idioms the translators can emit."""

    dplyr = "dplyr"
    data_table = "data.table"


class TranslationRequest(BaseModel):
    """SPSS syntax to translate, plus run options."""

    script: str = Field(description="SPSS syntax, newline-separated.")
    dialect: OutputDialect = Field(
        default=OutputDialect.dplyr,
        description="R idiom to generate.",
    )
    nosave: bool = Field(
        default=False,
        description="Pass-through mode: skip GET/SAVE commands.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "script": "GET FILE='survey.sav'.\nSORT CASES BY id.",
                "dialect": "dplyr",
                "nosave": False,
            }
        ]
    }}


class TranslationResponse(BaseModel):
    """The generated R script."""

    lines: List[str] = Field(description="R script, one entry per line.")
    text: str = Field(description="R script as a single newline-terminated string.")


class TranslatorInfo(BaseModel):
    """One registered SPSS command translator."""

    key: str = Field(description="Canonical command key, e.g. 'sortcases'.")
    name: str = Field(description="Dispatch name, e.g. 'sortcases_to_r'.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status. Always 'ok' when responding.")
    version: str = Field(description="Package version.")


class ErrorResponse(BaseModel):
    """Consistent error body for all 4xx responses."""

    detail: str = Field(description="Human-readable error message.")

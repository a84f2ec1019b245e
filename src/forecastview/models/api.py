# Copyright (c) Syntropy Systems
"""Pydantic models for forecasting backend requests and responses."""

from __future__ import annotations

from pydantic import Field, field_validator

from .base import ForecastViewModel, JSONObject


class RunRequest(ForecastViewModel):
    """Request to start a forecasting run."""

    fast_mode: bool = True


class RunResponse(ForecastViewModel):
    """Response from ``POST /run``."""

    ok: bool = False
    artifacts: list[str] = Field(default_factory=list)
    summary: JSONObject | None = None
    stdout_tail: list[str] = Field(default_factory=list)
    stderr_tail: list[str] = Field(default_factory=list)

    @field_validator("artifacts", "stdout_tail", "stderr_tail", mode="before")
    @classmethod
    def _strings_only(cls, value: object) -> list[str]:
        # The backend has been seen sending null and mixed lists here
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    @field_validator("summary", mode="before")
    @classmethod
    def _object_or_none(cls, value: object) -> object:
        return value if isinstance(value, dict) else None


class ErrorResponse(ForecastViewModel):
    """Error response."""

    detail: str

"""HTTP service configuration models."""

from __future__ import annotations

from pydantic import Field, field_validator

from lazypack.config.base import BaseConfig


class WebConfig(BaseConfig):
    """Settings for the FastAPI service."""

    title: str = Field("LazyPack API", description="Title reported in the OpenAPI schema", min_length=1)
    allowed_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        description="Origins allowed by the CORS middleware",
    )

    @field_validator("allowed_origins")
    @classmethod
    def _strip_origins(cls, origins: list[str]) -> list[str]:
        return [origin.strip().rstrip("/") for origin in origins if origin.strip()]


__all__ = ["WebConfig"]

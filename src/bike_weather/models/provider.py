"""Provider configuration and status models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProviderConfig(BaseModel):
    """Configuration for a single weather provider."""

    api_key: str | None = Field(default=None, description="Provider credential")
    priority: int = Field(default=0, description="Lower values are tried first")
    enabled: bool = True


class ProviderDescriptor(BaseModel):
    """Public view of a provider and whether it can be used."""

    id: str
    display_name: str
    available: bool

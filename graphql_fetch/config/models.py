"""
Configuration models for graphql_fetch.

This module defines the settings a client can be built from with
:meth:`graphql_fetch.GraphQLClient.from_settings`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientSettings(BaseModel):
    """Settings for a GraphQL client."""

    model_config = ConfigDict(extra="forbid")

    url: Optional[str] = Field(default=None, description="GraphQL endpoint URL")
    headers: Dict[str, str] = Field(default_factory=dict, description="Default headers for requests")
    fetch_options: Dict[str, Any] = Field(
        default_factory=dict, description="Default transport options for requests"
    )
    ssr_mode: bool = Field(default=False, description="Server-side rendering mode")
    log_errors: bool = Field(default=True, description="Log errored results")
    timeout: Optional[float] = Field(default=None, gt=0, description="Total request timeout in seconds")

    @field_validator("url")
    @classmethod
    def strip_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

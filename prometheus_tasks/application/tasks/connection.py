"""
Connection Configuration

Fields shared by every invocation that talks to a Prometheus-compatible
endpoint: base URL, basic auth, extra headers and httpx client overrides.
"""

import httpx
from pydantic import BaseModel, Field, field_validator

from prometheus_tasks.infrastructure.http import HttpClientOptions, RequestDispatcher


class ConnectionConfig(BaseModel):
    """
    Endpoint and authentication settings.

    Basic auth is used when both ``username`` and ``password`` are set,
    even when one of them is an empty string.
    """
    model_config = {"frozen": True}

    url: str = Field(..., min_length=1, description="Base URL of the endpoint")
    username: str | None = Field(default=None, description="Basic auth username")
    password: str | None = Field(default=None, repr=False, description="Basic auth password")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra request headers; override defaults case-insensitively",
    )
    options: HttpClientOptions | None = Field(default=None, description="HTTP client overrides")

    @field_validator("headers", mode="before")
    @classmethod
    def default_headers(cls, v):
        return {} if v is None else v

    @property
    def base_url(self) -> str:
        """Base URL without a trailing slash."""
        return self.url.rstrip("/")

    def dispatcher(self, transport: httpx.AsyncBaseTransport | None = None) -> RequestDispatcher:
        """Create the dispatcher for one invocation."""
        return RequestDispatcher(
            options=self.options,
            username=self.username,
            password=self.password,
            transport=transport,
        )

import os
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .transport import DEFAULT_TIMEOUT

DEFAULT_URL = "tcp://localhost:5000"


class CatalogResponse(BaseModel):
    """Registry catalog response"""
    repositories: List[str]

    @field_validator("repositories", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        # A registry with no repositories may send null
        return [] if v is None else v


class TagsResponse(BaseModel):
    """Registry tags list response"""
    name: str
    tags: List[str]

    @field_validator("tags", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        # Deleting every tag leaves {"tags": null}
        return [] if v is None else v


class ErrorDetail(BaseModel):
    """One entry of a registry error body"""
    code: str
    message: str = ""
    detail: Optional[Any] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ErrorsResponse(BaseModel):
    """
    Structured error body a registry may send with a 4xx status

    The client does not decode these on its own; callers that fetch an
    error body themselves can use ``parse_body``.
    """
    errors: List[ErrorDetail] = Field(default_factory=list)

    @classmethod
    def parse_body(cls, data: bytes) -> Optional["ErrorsResponse"]:
        """Return the decoded errors, or None if the body is not in this shape"""
        try:
            return cls.model_validate_json(data)
        except ValidationError:
            return None


class RegistryConfig(BaseModel):
    """Registry client configuration"""
    url: str = Field(default=DEFAULT_URL, min_length=1)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)

    @field_validator('url')
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip()

    @classmethod
    def from_env(cls) -> "RegistryConfig":
        """Build a config from REGCLIENT_URL / REGCLIENT_TIMEOUT, defaulting the rest"""
        values = {}
        if os.getenv("REGCLIENT_URL"):
            values["url"] = os.environ["REGCLIENT_URL"]
        if os.getenv("REGCLIENT_TIMEOUT"):
            values["timeout"] = os.environ["REGCLIENT_TIMEOUT"]
        return cls.model_validate(values)

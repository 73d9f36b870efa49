"""Domain models for the stack configuration and rendering placeholders."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FRONTEND_PORT = 3000
DEFAULT_TLD = "test"


class StackConfig(BaseModel):
    """Configuration resolved once per run and passed to every step."""

    model_config = ConfigDict(frozen=True)

    base_domain: str = Field(..., min_length=1, description="Herd site name")
    frontend_port: int = Field(
        default=DEFAULT_FRONTEND_PORT, gt=0, description="Next.js dev server port"
    )
    tld: str = Field(
        default=DEFAULT_TLD, min_length=1, description="Top-level domain Herd serves"
    )
    preserved_secret: str | None = Field(
        default=None, description="APP_KEY carried over from an existing backend/.env"
    )

    def with_secret(self, secret: str | None) -> StackConfig:
        return self.model_copy(update={"preserved_secret": secret})


class Placeholder(str, Enum):
    """Names a stub may reference as ``{{NAME}}``."""

    BASE_DOMAIN = "BASE_DOMAIN"
    FRONTEND_PORT = "FRONTEND_PORT"
    TLD = "TLD"
    APP_KEY = "APP_KEY"


# Placeholder -> StackConfig field
PLACEHOLDER_FIELDS: dict[Placeholder, str] = {
    Placeholder.BASE_DOMAIN: "base_domain",
    Placeholder.FRONTEND_PORT: "frontend_port",
    Placeholder.TLD: "tld",
    Placeholder.APP_KEY: "preserved_secret",
}

# Rendered as an empty string when the field is unset.
OPTIONAL_PLACEHOLDERS: frozenset[Placeholder] = frozenset({Placeholder.APP_KEY})


class Service(str, Enum):
    BACKEND = "backend"
    FRONTEND = "frontend"


class ServiceState(str, Enum):
    NEEDS_SCAFFOLD = "needs_scaffold"
    EXISTS_ALREADY = "exists_already"


class Mode(str, Enum):
    FULL_SETUP = "full_setup"
    CONFIG_ONLY = "config_only"

"""Configuration consumed by a documentation pass.

Loaded once from a YAML file (or built in code) and validated up front:
anything malformed raises ConfigError before a pass starts.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from routespec.errors import ConfigError

FORMATS = ("json", "yaml")
MODES = ("standalone", "contributor", "aggregator")


class Contact(BaseModel):
    name: str | None = None
    email: str | None = None
    url: str | None = None


class License(BaseModel):
    name: str | None = None
    url: str | None = None


class Info(BaseModel):
    """The document's `info` block."""

    title: str | None = None
    description: str | None = None
    version: str | None = None
    contact: Contact | None = None
    license: License | None = None


class OAuthFlow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    authorization_url: str = Field(alias="authorizationUrl")
    token_url: str | None = Field(None, alias="tokenUrl")
    refresh_url: str | None = Field(None, alias="refreshUrl")
    scopes: dict[str, str] | None = None


class SecurityScheme(BaseModel):
    """A `components.securitySchemes` entry."""

    model_config = ConfigDict(populate_by_name=True)

    type: str  # apiKey / http / oauth2 / openIdConnect
    scheme: str | None = None  # basic / bearer, for http
    in_: str | None = Field(None, alias="in")  # header / query / cookie
    name: str | None = None
    bearer_format: str | None = Field(None, alias="bearerFormat")
    description: str | None = None
    flows: dict[str, OAuthFlow] | None = None
    open_id_connect_url: str | None = Field(None, alias="openIdConnectUrl")


class TypeOverride(BaseModel):
    """Replaces structural synthesis of one canonical type name."""

    canonical_name: str
    serialized_as: str | None = None  # integer / string / ...
    format: str | None = None  # int64 / date-time / ...
    description: str | None = None


class DocsConfig(BaseModel):
    """All switches a documentation pass reads."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    format: str = "yaml"
    file_path: str = "openapi.yaml"
    generate_request_schemas: bool = True
    hide_transient_fields: bool = True
    hide_private_fields: bool = True
    derive_required_from_nullability: bool = True
    use_doc_comments: bool = True
    discriminator: str = "type"
    servers: list[str] = []
    info: Info = Info(title="Open API Specification", description="", version="1.0.0")
    security: list[dict[str, list[str]]] = []
    security_schemes: dict[str, SecurityScheme] = {}
    overrides: list[TypeOverride] = []
    # multi-module builds
    module_id: str | None = None
    mode: str = "standalone"
    partial_spec_paths: list[str] = []

    @field_validator("format")
    @classmethod
    def _check_format(cls, value: str) -> str:
        value = value.lower()
        if value not in FORMATS:
            raise ValueError(f"format must be one of {', '.join(FORMATS)}, got {value!r}")
        return value

    @field_validator("mode")
    @classmethod
    def _check_mode(cls, value: str) -> str:
        if value not in MODES:
            raise ValueError(f"mode must be one of {', '.join(MODES)}, got {value!r}")
        return value

    @model_validator(mode="after")
    def _check_module(self) -> "DocsConfig":
        if self.mode == "contributor" and not self.module_id:
            raise ValueError("contributor mode requires module_id")
        return self

    @property
    def is_contributor(self) -> bool:
        return self.mode == "contributor"

    @property
    def is_aggregator(self) -> bool:
        return self.mode == "aggregator"

    def override_for(self, canonical_name: str) -> TypeOverride | None:
        for override in self.overrides:
            if override.canonical_name == canonical_name:
                return override
        return None


def load_config(file_path: Path | None) -> DocsConfig:
    """Load a DocsConfig from YAML; `None` yields the defaults."""
    if file_path is None:
        return DocsConfig()
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {file_path}: {e}") from e

    try:
        return DocsConfig.model_validate(data or {})
    except ValidationError as e:
        raise ConfigError(f"Invalid config {file_path}:\n{e}") from e

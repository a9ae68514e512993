"""Data models for endpoints extracted from the Helix API reference.

The extractor builds these once per documentation section and never
mutates them afterwards. Sequences are tuples and token types are a
read-only mapping, so a built record cannot be changed in place. Fields
serialize with camelCase aliases so the written table keeps the column
names of the reference page's JSON style.
"""

from types import MappingProxyType
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

APP_TOKEN = "App Token"
USER_TOKEN = "User Token"

TokenKind = Literal["App Token", "User Token"]


def _freeze_tokens(value: dict) -> MappingProxyType:
    return MappingProxyType(value)


def _dump_tokens(value) -> dict:
    return dict(value)


TokenTypes = Annotated[
    dict[TokenKind, bool | tuple[str, ...]],
    AfterValidator(_freeze_tokens),
    PlainSerializer(_dump_tokens),
]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ParamRow(_Record):
    """One row of a query, request body, or response body table."""

    name: str
    type: str  # free-form label as written in the docs
    required: bool = False  # only meaningful for query parameters
    description: str = ""


class ExamplePair(_Record):
    """A request snippet matched with the response that follows it."""

    description: str = ""
    request: str = ""
    response: str = ""


class EndpointSpec(_Record):
    http_method: str  # GET / POST / PUT / PATCH / DELETE
    path: str  # users/follows, never prefixed with the base URL
    full_path: str


class EndpointRecord(_Record):
    """A single documented endpoint with everything pulled from its section."""

    docs_link: str
    title: str
    description: str = ""
    token_types: TokenTypes = Field(default={}, validate_default=True)  # {"User Token": ("user:read:email",)}
    endpoint_spec: EndpointSpec
    request_params: tuple[ParamRow, ...] = ()
    body_params: tuple[ParamRow, ...] = ()
    response_params: tuple[ParamRow, ...] = ()
    examples: tuple[ExamplePair, ...] = ()

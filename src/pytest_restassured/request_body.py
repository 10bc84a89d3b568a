import json
import mimetypes
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import to_jsonable_python

from .exceptions import RequestCreationError
from .xml_body import to_xml

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
FALLBACK_FILE_CONTENT_TYPE = "application/octet-stream"


class RawBody(BaseModel):
    text: str | bytes = Field(description="Body sent as is.")
    model_config = ConfigDict(extra="forbid")


class StructuredBody(BaseModel):
    value: Any = Field(description="Object serialized according to the request content type.")
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)


RequestBody = RawBody | StructuredBody


class GraphQLRequest(BaseModel):
    query: str = Field(description="GraphQL query string.")
    operation_name: str | None = Field(default=None, serialization_alias="operationName")
    variables: dict[str, Any] | None = Field(default=None, description="GraphQL query variables.")
    model_config = ConfigDict(extra="forbid")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class GraphQLRequestBuilder:
    def __init__(self):
        self._query = ""
        self._operation_name: str | None = None
        self._variables: dict[str, Any] | None = None

    def with_query(self, query: str) -> Self:
        self._query = query
        return self

    def with_operation_name(self, operation_name: str) -> Self:
        self._operation_name = operation_name
        return self

    def with_variables(self, variables: dict[str, Any]) -> Self:
        self._variables = variables
        return self

    def build(self) -> GraphQLRequest:
        return GraphQLRequest(query=self._query, operation_name=self._operation_name, variables=self._variables)


def tag_body(body: Any) -> RequestBody:
    """Decide once whether a body is sent verbatim or serialized later."""
    if isinstance(body, RawBody | StructuredBody):
        return body
    if isinstance(body, str | bytes):
        return RawBody(text=body)
    return StructuredBody(value=body)


def serialize_body(body: RequestBody, content_type: str, encoding: str) -> bytes:
    """Turn a request body into bytes according to the request content type.

    Raises:
        RequestCreationError: If a structured body cannot be serialized for `content_type`.
    """
    match body:
        case RawBody(text=bytes() as data):
            return data
        case RawBody(text=str() as text):
            return text.encode(encoding)
        case StructuredBody(value=value):
            lowered = content_type.lower()
            if "json" in lowered:
                return json.dumps(to_jsonable_python(value), ensure_ascii=False).encode(encoding)
            if "xml" in lowered:
                try:
                    return to_xml(value, encoding).encode(encoding)
                except ValueError as e:
                    raise RequestCreationError(str(e)) from None

    raise RequestCreationError(f"Could not determine how to serialize request based on specified content type '{content_type}'")


def content_type_header(content_type: str, encoding: str, strip_charset: bool = False) -> str:
    if strip_charset or "charset" in content_type.lower():
        return content_type
    return f"{content_type}; charset={encoding}"


def content_type_for_file(path: Path) -> str:
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or FALLBACK_FILE_CONTENT_TYPE


def read_upload(path: str | Path, control_name: str, content_type: str | None = None) -> tuple[str, tuple[str, bytes, str]]:
    """Load a file into an httpx multipart entry.

    Raises:
        RequestCreationError: If the file cannot be read.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise RequestCreationError(str(e)) from None
    return control_name, (path.name, data, content_type or content_type_for_file(path))

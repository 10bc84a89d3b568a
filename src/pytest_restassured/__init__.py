import httpx

from .config import LogConfiguration, RestAssuredConfiguration
from .constants import DeserializeAs, ExtractAs, RequestLogLevel, ResponseLogLevel, ReturnAs, VerifyAs
from .exceptions import (
    DeserializationError,
    ExtractionError,
    HttpRequestProcessorError,
    RequestCreationError,
    RequestTimeoutError,
    ResponseVerificationError,
    RestAssuredError,
    TransportError,
    VerificationError,
)
from .extraction import ExtractableResponse
from .request import ExecutableRequest
from .request_body import GraphQLRequest, GraphQLRequestBuilder
from .response import VerifiableResponse
from .specification import RequestSpecBuilder, RequestSpecification


def given(config: RestAssuredConfiguration | None = None, http_client: httpx.Client | None = None) -> ExecutableRequest:
    """Start a request. An injected `http_client` is used as is and never closed."""
    return ExecutableRequest(config, http_client)


__all__ = [
    "DeserializationError",
    "DeserializeAs",
    "ExecutableRequest",
    "ExtractAs",
    "ExtractableResponse",
    "ExtractionError",
    "GraphQLRequest",
    "GraphQLRequestBuilder",
    "HttpRequestProcessorError",
    "LogConfiguration",
    "RequestCreationError",
    "RequestLogLevel",
    "RequestSpecBuilder",
    "RequestSpecification",
    "RequestTimeoutError",
    "ResponseLogLevel",
    "ResponseVerificationError",
    "RestAssuredConfiguration",
    "RestAssuredError",
    "ReturnAs",
    "TransportError",
    "VerifiableResponse",
    "VerificationError",
    "VerifyAs",
    "given",
]

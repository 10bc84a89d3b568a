"""Dispatch of a single request.

Builds the URL, headers and body from the request and its optional
specification, sends it once through httpx, buffers the response and maps
transport failures to HttpRequestProcessorError.
"""

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any
from urllib.parse import urlencode

import httpx

from .config import LogConfiguration, RestAssuredConfiguration
from .constants import DEFAULT_CONTENT_ENCODING, DEFAULT_CONTENT_TYPE, DEFAULT_TIMEOUT_SECONDS
from .exceptions import HttpRequestProcessorError, RequestCreationError, RequestTimeoutError
from .logger import RequestResponseLogger
from .request_body import FORM_CONTENT_TYPE, RawBody, RequestBody, content_type_header, serialize_body
from .response import VerifiableResponse, response_cookies
from .specification import RequestSpecification

logger = logging.getLogger(__name__)

PATH_PARAM_PATTERN = re.compile(r"\{(?P<name>[^{}]+)\}")


@dataclass
class RequestContext:
    config: RestAssuredConfiguration = field(default_factory=RestAssuredConfiguration)
    http_client: httpx.Client | None = None
    specification: RequestSpecification | None = None
    headers: list[tuple[str, str]] = field(default_factory=list)
    authorization: str | None = None
    user_agent: str | None = None
    cookies: httpx.Cookies = field(default_factory=httpx.Cookies)
    path_params: dict[str, str] = field(default_factory=dict)
    query_params: list[tuple[str, str]] = field(default_factory=list)
    body: RequestBody = field(default_factory=lambda: RawBody(text=""))
    content_type: str = DEFAULT_CONTENT_TYPE
    content_encoding: str = DEFAULT_CONTENT_ENCODING
    strip_charset: bool = False
    form_data: list[tuple[str, str]] | None = None
    multipart: list[tuple[str, Any]] | None = None
    timeout: timedelta | None = None
    proxy: str | None = None
    disable_ssl_certificate_validation: bool = False
    log_configuration: LogConfiguration | None = None
    response_hooks: list[Callable[[VerifiableResponse], Any]] = field(default_factory=list)


def render_path_params(endpoint: str, path_params: dict[str, str]) -> str:
    """Substitute `{name}` placeholders; unknown placeholders are left untouched."""
    if not path_params:
        return endpoint

    def replace(match: re.Match[str]) -> str:
        return path_params.get(match.group("name"), match.group(0))

    return PATH_PARAM_PATTERN.sub(replace, endpoint)


def build_url(endpoint: str, context: RequestContext) -> httpx.URL:
    endpoint = render_path_params(endpoint, context.path_params)

    try:
        url = httpx.URL(endpoint)
    except httpx.InvalidURL as e:
        raise RequestCreationError(f"Supplied endpoint '{endpoint}' is not a valid URI: {e}") from None

    if not url.is_absolute_url:
        if context.specification is None:
            raise RequestCreationError(f"Cannot send a request to relative endpoint '{endpoint}' without a request specification.")
        url = context.specification.build_url(endpoint)

    query_params = list(context.specification.query_params) if context.specification else []
    query_params.extend(context.query_params)
    if query_params:
        url = url.copy_merge_params(query_params)
    return url


def resolve_timeout(context: RequestContext) -> timedelta:
    spec_timeout = context.specification.timeout if context.specification else None
    return context.timeout or spec_timeout or context.config.timeout or timedelta(seconds=DEFAULT_TIMEOUT_SECONDS)


def resolve_log_configuration(context: RequestContext) -> LogConfiguration:
    spec = context.specification
    log_configuration = context.log_configuration or (spec.log_configuration if spec else None) or context.config.log_configuration
    if spec and spec.sensitive_request_headers_and_cookies:
        log_configuration = log_configuration.model_copy(
            update={
                "sensitive_request_headers_and_cookies": [
                    *log_configuration.sensitive_request_headers_and_cookies,
                    *spec.sensitive_request_headers_and_cookies,
                ]
            }
        )
    return log_configuration


def _build_headers(context: RequestContext) -> list[tuple[str, str]]:
    spec = context.specification
    headers = list(context.headers)

    if spec:
        headers.extend(spec.headers.items())

    authorization = context.authorization or (spec.authorization if spec else None)
    if authorization:
        headers.append(("Authorization", authorization))

    user_agents = [ua for ua in (context.user_agent, spec.user_agent if spec else None) if ua]
    if user_agents:
        headers.append(("User-Agent", " ".join(user_agents)))

    return headers


def prepare_request_kwargs(method: str, endpoint: str, context: RequestContext) -> dict[str, Any]:
    spec = context.specification
    headers = _build_headers(context)

    request_kwargs: dict[str, Any] = {
        "method": method,
        "url": build_url(endpoint, context),
        "timeout": resolve_timeout(context).total_seconds(),
    }

    if context.multipart is not None:
        # httpx generates the multipart Content-Type with its boundary
        request_kwargs["files"] = context.multipart
    elif context.form_data is not None:
        headers.append(("Content-Type", FORM_CONTENT_TYPE))
        request_kwargs["content"] = urlencode(context.form_data).encode("ascii")
    else:
        content_type = (spec.content_type if spec else None) or context.content_type
        encoding = (spec.content_encoding if spec else None) or context.content_encoding
        headers.append(("Content-Type", content_type_header(content_type, encoding, context.strip_charset)))
        request_kwargs["content"] = serialize_body(context.body, content_type, encoding)

    request_kwargs["headers"] = headers
    return request_kwargs


def _client_for(context: RequestContext) -> tuple[httpx.Client, bool]:
    if context.http_client is not None:
        return context.http_client, False

    spec = context.specification
    disable_ssl = (
        context.disable_ssl_certificate_validation
        or context.config.disable_ssl_certificate_validation
        or (spec.disable_ssl_certificate_validation if spec else False)
    )
    client = httpx.Client(
        cookies=context.cookies,
        verify=not disable_ssl,
        proxy=context.proxy or (spec.proxy if spec else None),
        follow_redirects=True,
    )
    return client, True


def send(method: str, endpoint: str, context: RequestContext) -> VerifiableResponse:
    """Send one request and return the buffered response.

    Raises:
        RequestCreationError: If the URL or body cannot be built.
        RequestTimeoutError: If no response arrived within the resolved timeout.
        HttpRequestProcessorError: For any other transport failure.
    """
    request_kwargs = prepare_request_kwargs(method, endpoint, context)
    timeout = resolve_timeout(context)
    request_logger = RequestResponseLogger(resolve_log_configuration(context))

    client, owned = _client_for(context)
    try:
        request = client.build_request(**request_kwargs, cookies=context.cookies)
        request_logger.log_request(request, context.cookies)

        start = time.perf_counter()
        try:
            response = client.send(request)
        except httpx.TimeoutException:
            raise RequestTimeoutError(f"Request timeout of {timeout} exceeded.") from None
        except httpx.HTTPError as e:
            raise HttpRequestProcessorError(f"Unhandled exception {e}") from None
        elapsed = timedelta(seconds=time.perf_counter() - start)

        # an owned jar belongs to this request only, redirect cookies included
        cookies = httpx.Cookies(client.cookies) if owned else response_cookies(response, context.cookies)
    finally:
        if owned:
            client.close()

    logger.debug(f"{method} {request.url} -> {response.status_code} in {elapsed}")

    verifiable_response = request_logger.log_response(VerifiableResponse(response, cookies, elapsed))
    for hook in context.response_hooks:
        hook(verifiable_response)
    return verifiable_response

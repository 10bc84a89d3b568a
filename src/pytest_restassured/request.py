from collections.abc import Callable, Iterable, Mapping
from datetime import timedelta
from http import HTTPMethod
from pathlib import Path
from typing import Any, Self

import httpx

from .config import LogConfiguration, RestAssuredConfiguration
from .executor import RequestContext, send
from .request_body import GraphQLRequest, StructuredBody, read_upload, tag_body
from .response import VerifiableResponse
from .specification import RequestSpecification, basic_auth_header, bearer_auth_header


class ExecutableRequest:
    """Fluent builder for one HTTP request.

    Each setter returns the same builder. A verb method (get, post, ...) sends the
    request once and returns a VerifiableResponse for the buffered response.
    """

    def __init__(self, config: RestAssuredConfiguration | None = None, http_client: httpx.Client | None = None):
        self._context = RequestContext(config=config or RestAssuredConfiguration(), http_client=http_client)

    def spec(self, specification: RequestSpecification) -> Self:
        self._context.specification = specification
        return self

    def header(self, key: str, value: object | Iterable[object]) -> Self:
        if isinstance(value, Iterable) and not isinstance(value, str | bytes):
            self._context.headers.extend((key, str(v)) for v in value)
        else:
            self._context.headers.append((key, str(value)))
        return self

    def headers(self, headers: Mapping[str, object]) -> Self:
        for key, value in headers.items():
            self.header(key, value)
        return self

    def content_type(self, content_type: str) -> Self:
        self._context.content_type = content_type
        return self

    def content_encoding(self, encoding: str) -> Self:
        self._context.content_encoding = encoding
        return self

    def accept(self, accept: str) -> Self:
        return self.header("Accept", accept)

    def query_param(self, key: str, *values: object) -> Self:
        self._context.query_params.extend((key, str(value)) for value in values)
        return self

    def query_params(self, params: Mapping[str, object] | Iterable[tuple[str, object]]) -> Self:
        """Add query parameters after any already set.

        Args:
            params: Mapping or pairs of names and values. List and tuple values are
                joined with commas into a single parameter.
        """
        items = params.items() if isinstance(params, Mapping) else params
        for key, value in items:
            if isinstance(value, list | tuple):
                value = ",".join(str(v) for v in value)
            self._context.query_params.append((key, str(value)))
        return self

    def path_param(self, key: str, value: object) -> Self:
        self._context.path_params[key] = str(value)
        return self

    def path_params(self, params: Mapping[str, object]) -> Self:
        for key, value in params.items():
            self.path_param(key, value)
        return self

    def basic_auth(self, username: str, password: str) -> Self:
        self._context.authorization = basic_auth_header(username, password)
        return self

    def oauth2(self, token: str) -> Self:
        self._context.authorization = bearer_auth_header(token)
        return self

    def cookie(self, name: str, value: str, domain: str = "", path: str = "/") -> Self:
        """Send a cookie with the request. An empty domain matches any host."""
        self._context.cookies.set(name, value, domain=domain, path=path)
        return self

    def cookies(self, cookies: httpx.Cookies | Mapping[str, str]) -> Self:
        self._context.cookies.update(cookies)
        return self

    def form_data(self, form_data: Mapping[str, object] | Iterable[tuple[str, object]]) -> Self:
        items = form_data.items() if isinstance(form_data, Mapping) else form_data
        self._context.form_data = [(key, str(value)) for key, value in items]
        return self

    def multipart(self, file: str | Path, control_name: str = "file", content_type: str | None = None) -> Self:
        """Attach a file as a multipart/form-data part.

        Raises:
            RequestCreationError: If the file cannot be read.
        """
        entry = read_upload(file, control_name, content_type)
        self._context.multipart = [*(self._context.multipart or []), entry]
        return self

    def multipart_content(self, name: str, content: str | bytes, content_type: str | None = None) -> Self:
        part = (None, content) if content_type is None else (None, content, content_type)
        self._context.multipart = [*(self._context.multipart or []), (name, part)]
        return self

    def graphql(self, graphql_request: GraphQLRequest) -> Self:
        self._context.body = StructuredBody(value=graphql_request.to_payload())
        return self

    def timeout(self, timeout: timedelta) -> Self:
        self._context.timeout = timeout
        return self

    def user_agent(self, product_name: str, product_version: str) -> Self:
        self._context.user_agent = f"{product_name}/{product_version}"
        return self

    def proxy(self, proxy: str) -> Self:
        self._context.proxy = proxy
        return self

    def disable_ssl_certificate_validation(self) -> Self:
        self._context.disable_ssl_certificate_validation = True
        return self

    def log(self, log_configuration: LogConfiguration) -> Self:
        self._context.log_configuration = log_configuration
        return self

    def body(self, body: Any, strip_charset: bool = False) -> Self:
        """Set the request body.

        Strings and bytes are sent as they are. Any other value is serialized when
        the request is sent, as JSON or XML depending on the content type.

        Args:
            body: The body value
            strip_charset: Send the Content-Type header without the charset parameter
        """
        self._context.body = tag_body(body)
        self._context.strip_charset = strip_charset
        return self

    def on_response(self, hook: Callable[[VerifiableResponse], Any]) -> Self:
        """Register a callable invoked with every response this builder receives."""
        self._context.response_hooks.append(hook)
        return self

    def and_(self) -> Self:
        return self

    def when(self) -> Self:
        return self

    def get(self, endpoint: str) -> VerifiableResponse:
        return self.invoke(endpoint, HTTPMethod.GET)

    def post(self, endpoint: str) -> VerifiableResponse:
        return self.invoke(endpoint, HTTPMethod.POST)

    def put(self, endpoint: str) -> VerifiableResponse:
        return self.invoke(endpoint, HTTPMethod.PUT)

    def patch(self, endpoint: str) -> VerifiableResponse:
        return self.invoke(endpoint, HTTPMethod.PATCH)

    def delete(self, endpoint: str) -> VerifiableResponse:
        return self.invoke(endpoint, HTTPMethod.DELETE)

    def head(self, endpoint: str) -> VerifiableResponse:
        return self.invoke(endpoint, HTTPMethod.HEAD)

    def options(self, endpoint: str) -> VerifiableResponse:
        return self.invoke(endpoint, HTTPMethod.OPTIONS)

    def invoke(self, endpoint: str, method: HTTPMethod | str) -> VerifiableResponse:
        """Send the request once with any HTTP method.

        Args:
            endpoint: Absolute URL, or a path relative to the request specification.
                `{name}` placeholders are replaced by path parameters.
            method: HTTP method name

        Returns:
            The buffered response, ready for verification

        Raises:
            RequestCreationError: If the URL or body cannot be built
            HttpRequestProcessorError: If no response was received
        """
        return send(str(method).upper(), endpoint, self._context)

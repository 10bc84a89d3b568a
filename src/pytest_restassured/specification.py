import base64
from datetime import timedelta
from typing import Self

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .config import LogConfiguration, PositiveTimedelta
from .exceptions import RequestCreationError


def basic_auth_header(username: str, password: str) -> str:
    credentials = base64.b64encode(f"{username}:{password}".encode("ascii")).decode("ascii")
    return f"Basic {credentials}"


def bearer_auth_header(token: str) -> str:
    return f"Bearer {token}"


class RequestSpecification(BaseModel):
    """Settings shared by many requests: where to send them and how to build them."""

    scheme: str = Field(default="http")
    host_name: str = Field(default="localhost")
    port: int | None = Field(default=None, description="None selects the default port for the scheme.")
    base_path: str = Field(default="")
    query_params: list[tuple[str, str]] = Field(default_factory=list)
    timeout: PositiveTimedelta | None = Field(default=None)
    user_agent: str | None = Field(default=None)
    proxy: str | None = Field(default=None)
    headers: dict[str, str] = Field(default_factory=dict)
    authorization: str | None = Field(default=None, description="Authorization header value.")
    content_type: str | None = Field(default=None)
    content_encoding: str | None = Field(default=None)
    disable_ssl_certificate_validation: bool = Field(default=False)
    log_configuration: LogConfiguration | None = Field(default=None)
    sensitive_request_headers_and_cookies: list[str] = Field(default_factory=list)
    model_config = ConfigDict(extra="forbid")

    def build_url(self, endpoint: str) -> httpx.URL:
        """Join the base path and a relative endpoint onto the base URI."""
        path = f"{self.base_path.strip('/')}/{endpoint.strip('/')}"
        if not path.startswith("/"):
            path = "/" + path
        components = {"scheme": self.scheme, "host": self.host_name, "path": path}
        if self.port is not None:
            components["port"] = self.port
        try:
            return httpx.URL(**components)
        except httpx.InvalidURL:
            port = f":{self.port}" if self.port is not None else ""
            raise RequestCreationError(f"Supplied base URI '{self.scheme}://{self.host_name}{port}' is invalid.") from None


class RequestSpecBuilder:
    def __init__(self):
        self._specification = RequestSpecification()

    def with_base_uri(self, base_uri: str) -> Self:
        """Take scheme, host and port from `base_uri`; its path is ignored, see with_base_path."""
        try:
            url = httpx.URL(base_uri)
        except httpx.InvalidURL:
            raise RequestCreationError(f"Supplied value '{base_uri}' is not a valid URI") from None
        if not url.scheme or not url.host:
            raise RequestCreationError(f"Supplied value '{base_uri}' is not a valid URI")

        self._specification.scheme = url.scheme
        self._specification.host_name = url.host
        self._specification.port = url.port
        return self

    def with_port(self, port: int) -> Self:
        self._specification.port = port
        return self

    def with_base_path(self, base_path: str) -> Self:
        self._specification.base_path = base_path
        return self

    def with_query_param(self, key: str, *values: object) -> Self:
        self._specification.query_params.extend((key, str(value)) for value in values)
        return self

    def with_timeout(self, timeout: timedelta) -> Self:
        self._specification.timeout = timeout
        return self

    def with_user_agent(self, product_name: str, product_version: str) -> Self:
        self._specification.user_agent = f"{product_name}/{product_version}"
        return self

    def with_proxy(self, proxy: str) -> Self:
        self._specification.proxy = proxy
        return self

    def with_header(self, key: str, value: object) -> Self:
        self._specification.headers[key] = str(value)
        return self

    def with_basic_auth(self, username: str, password: str) -> Self:
        self._specification.authorization = basic_auth_header(username, password)
        return self

    def with_oauth2(self, token: str) -> Self:
        self._specification.authorization = bearer_auth_header(token)
        return self

    def with_content_type(self, content_type: str) -> Self:
        self._specification.content_type = content_type
        return self

    def with_content_encoding(self, encoding: str) -> Self:
        self._specification.content_encoding = encoding
        return self

    def with_disabled_ssl_certificate_validation(self) -> Self:
        self._specification.disable_ssl_certificate_validation = True
        return self

    def with_log_configuration(self, log_configuration: LogConfiguration) -> Self:
        self._specification.log_configuration = log_configuration
        return self

    def with_masking_of_headers_and_cookies(self, sensitive_header_or_cookie_names: list[str]) -> Self:
        self._specification.sensitive_request_headers_and_cookies.extend(sensitive_header_or_cookie_names)
        return self

    def build(self) -> RequestSpecification:
        # values assigned through the builder are not validated until here
        return RequestSpecification.model_validate(self._specification.model_dump())

import logging
from collections.abc import Collection
from datetime import timedelta
from typing import TYPE_CHECKING

import httpx

from .config import LogConfiguration
from .constants import RequestLogLevel, ResponseLogLevel
from .report_formatter import (
    format_body,
    format_cookies,
    format_elapsed,
    format_endpoint,
    format_headers,
    format_status_line,
    request_content,
)

if TYPE_CHECKING:
    from .response import VerifiableResponse

logger = logging.getLogger(__name__)


def _emit(lines: list[str]) -> None:
    for line in lines:
        logger.info(line)


def log_request(
    request: httpx.Request,
    cookies: httpx.Cookies | None,
    level: RequestLogLevel,
    sensitive: Collection[str] = (),
) -> None:
    if level == RequestLogLevel.NONE:
        return

    lines = [format_endpoint(request)]

    if level in (RequestLogLevel.HEADERS, RequestLogLevel.ALL):
        lines.extend(format_headers(request.headers, sensitive))
        lines.extend(format_cookies(cookies, sensitive))

    if level in (RequestLogLevel.BODY, RequestLogLevel.ALL):
        body = format_body(request_content(request), request.headers.get("content-type", ""))
        if body is not None:
            lines.append(body)

    _emit(lines)


def log_response(
    response: httpx.Response,
    cookies: httpx.Cookies | None,
    elapsed: timedelta,
    level: ResponseLogLevel,
    sensitive: Collection[str] = (),
) -> None:
    """Log response details for an unconditional log level.

    ON_ERROR logs everything only for 4xx/5xx responses; ON_VERIFICATION_FAILURE
    is handled by the response itself when a verification fails.
    """
    if level in (ResponseLogLevel.NONE, ResponseLogLevel.ON_VERIFICATION_FAILURE):
        return

    if level == ResponseLogLevel.ON_ERROR:
        if response.status_code < 400:
            return
        level = ResponseLogLevel.ALL

    lines = [format_status_line(response)]

    if level in (ResponseLogLevel.HEADERS, ResponseLogLevel.ALL):
        lines.extend(format_headers(response.headers, sensitive))
        lines.extend(format_cookies(cookies, sensitive))

    if level in (ResponseLogLevel.BODY, ResponseLogLevel.ALL):
        body = format_body(response.content, response.headers.get("content-type", ""))
        if body is not None:
            lines.append(body)

    if level in (ResponseLogLevel.RESPONSE_TIME, ResponseLogLevel.ALL):
        lines.append(format_elapsed(elapsed))

    _emit(lines)


class RequestResponseLogger:
    """Logs a single exchange according to a LogConfiguration."""

    def __init__(self, log_configuration: LogConfiguration):
        self.log_configuration = log_configuration

    def log_request(self, request: httpx.Request, cookies: httpx.Cookies | None) -> None:
        log_request(
            request,
            cookies,
            self.log_configuration.request_log_level,
            self.log_configuration.sensitive_request_headers_and_cookies,
        )

    def log_response(self, verifiable_response: "VerifiableResponse") -> "VerifiableResponse":
        level = self.log_configuration.response_log_level
        sensitive = self.log_configuration.sensitive_response_headers_and_cookies

        if level == ResponseLogLevel.ON_VERIFICATION_FAILURE:
            verifiable_response.log_on_verification_failure(sensitive)
            return verifiable_response

        log_response(
            verifiable_response.response,
            verifiable_response.cookies,
            verifiable_response.elapsed,
            level,
            sensitive,
        )
        return verifiable_response

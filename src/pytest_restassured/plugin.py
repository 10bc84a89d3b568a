"""Pytest plugin for fluent HTTP API tests.

Provides the `given` fixture, reads defaults for it from ini options and
attaches the last HTTP exchange of a failed test to its report.
"""

import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Any

import httpx
import pytest
from _pytest import config, nodes, reports, runner
from _pytest.config import argparsing
from pydantic import ValidationError

from .config import LogConfiguration, RestAssuredConfiguration
from .constants import ConfigOptions, RequestLogLevel, ResponseLogLevel
from .report_formatter import format_request, format_response
from .request import ExecutableRequest
from .response import VerifiableResponse

logger = logging.getLogger(__name__)

configuration_key = pytest.StashKey[RestAssuredConfiguration]()
exchanges_key = pytest.StashKey[list[VerifiableResponse]]()


def pytest_addoption(parser: argparsing.Parser) -> None:
    """Register ini options holding the defaults for requests made through `given`."""
    parser.addini(
        name=ConfigOptions.REQUEST_LOG_LEVEL,
        help=f"Request log level, one of: {', '.join(level.name for level in RequestLogLevel)}.",
        type="string",
        default=RequestLogLevel.NONE.name,
    )
    parser.addini(
        name=ConfigOptions.RESPONSE_LOG_LEVEL,
        help=f"Response log level, one of: {', '.join(level.name for level in ResponseLogLevel)}.",
        type="string",
        default=ResponseLogLevel.NONE.name,
    )
    parser.addini(
        name=ConfigOptions.DISABLE_SSL_CERTIFICATE_VALIDATION,
        help="Skip TLS certificate verification.",
        type="bool",
        default=False,
    )
    parser.addini(
        name=ConfigOptions.TIMEOUT,
        help="Default request timeout in seconds.",
        type="string",
        default="",
    )


def _parse_level(enum: type[RequestLogLevel] | type[ResponseLogLevel], option: ConfigOptions, value: str) -> Any:
    try:
        return enum[value.strip().upper()]
    except KeyError:
        raise ValueError(f"{option} must be one of {', '.join(level.name for level in enum)}, got '{value}'") from None


def _parse_timeout(value: str) -> timedelta | None:
    if not value.strip():
        return None
    try:
        seconds = float(value)
    except ValueError:
        raise ValueError(f"{ConfigOptions.TIMEOUT} must be a number of seconds, got '{value}'") from None
    if seconds <= 0:
        raise ValueError(f"{ConfigOptions.TIMEOUT} must be positive")
    return timedelta(seconds=seconds)


def pytest_configure(config: config.Config) -> None:
    """Validate ini options and store the resulting configuration.

    Raises:
        ValueError: If an option holds an invalid value
    """
    request_log_level = _parse_level(RequestLogLevel, ConfigOptions.REQUEST_LOG_LEVEL, str(config.getini(ConfigOptions.REQUEST_LOG_LEVEL)))
    response_log_level = _parse_level(ResponseLogLevel, ConfigOptions.RESPONSE_LOG_LEVEL, str(config.getini(ConfigOptions.RESPONSE_LOG_LEVEL)))
    timeout = _parse_timeout(str(config.getini(ConfigOptions.TIMEOUT)))

    try:
        configuration = RestAssuredConfiguration(
            disable_ssl_certificate_validation=bool(config.getini(ConfigOptions.DISABLE_SSL_CERTIFICATE_VALIDATION)),
            log_configuration=LogConfiguration(request_log_level=request_log_level, response_log_level=response_log_level),
            timeout=timeout,
        )
    except ValidationError as e:
        raise ValueError(f"Invalid restassured configuration: {e}") from None

    logger.debug(f"Using {configuration!r}")
    config.stash[configuration_key] = configuration


@pytest.fixture
def given(request: pytest.FixtureRequest) -> Callable[..., ExecutableRequest]:
    """Factory for request builders configured from the ini options.

    Every response received through a builder is recorded on the test item so
    it can be shown in the report when the test fails.

    Example:
        def test_get_user(given):
            given().get("https://api.example.com/users/1").then().status_code(200)
    """
    default_configuration = request.config.stash.get(configuration_key, RestAssuredConfiguration())
    exchanges = request.node.stash.setdefault(exchanges_key, [])

    def factory(config: RestAssuredConfiguration | None = None, http_client: httpx.Client | None = None) -> ExecutableRequest:
        return ExecutableRequest(config or default_configuration, http_client).on_response(exchanges.append)

    return factory


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: nodes.Item, call: runner.CallInfo[Any]) -> Any:
    """Add the last recorded HTTP exchange to the report of a failed test."""
    outcome = yield
    report: reports.TestReport = outcome.get_result()

    if call.when != "call" or not report.failed:
        return

    exchanges = item.stash.get(exchanges_key, [])
    if not exchanges:
        return

    last = exchanges[-1]
    report.sections.append(("HTTP Request", format_request(last.response.request)))
    report.sections.append(("HTTP Response", format_response(last.response, last.cookies, last.elapsed)))

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timedelta
from http import HTTPStatus
from typing import Any, NoReturn, Self

import httpx
from lxml import etree

from .constants import ContentTypeOverride, DeserializeAs, ResponseLogLevel, ReturnAs, SupportedContentType
from .content_type import media_type, require_content_type
from .deserialization import deserialize_response
from .exceptions import ExtractionError, ResponseVerificationError
from .extraction import ExtractableResponse, find_cookie
from .logger import log_response
from .matchers import Matcher, as_matcher, coerce
from .path_extractor import extract_from_response
from .schema import validate_inline_dtd, validate_json_schema, validate_xsd

logger = logging.getLogger(__name__)


def render_value(value: Any) -> str:
    match value:
        case None:
            return "null"
        case list():
            return "[" + ", ".join(render_value(v) for v in value) + "]"
        case dict():
            return json.dumps(value, ensure_ascii=False)
        case _:
            return str(value)


def _status_name(code: int) -> str:
    try:
        return HTTPStatus(code).name
    except ValueError:
        return str(code)


def response_cookies(response: httpx.Response, request_cookies: httpx.Cookies | None = None) -> httpx.Cookies:
    """Cookies sent with the request plus the ones set by this response."""
    cookies = httpx.Cookies(request_cookies)
    if "set-cookie" not in response.headers:
        return cookies

    try:
        response.request
    except RuntimeError:
        # cookie scoping needs the request URL
        response = httpx.Response(response.status_code, headers=response.headers, request=httpx.Request("GET", "http://localhost/"))
    cookies.extract_cookies(response)
    return cookies


class VerifiableResponse:
    """Fluent verification of a buffered HTTP response.

    Every verification method returns the same handle so checks can be chained,
    and raises ResponseVerificationError with a descriptive message on failure.
    The response is never re-fetched: all checks read the same buffered body.
    """

    def __init__(
        self,
        response: httpx.Response,
        cookies: httpx.Cookies | None = None,
        elapsed: timedelta | None = None,
    ):
        self.response = response
        self.cookies = cookies if cookies is not None else response_cookies(response)
        self.elapsed = elapsed if elapsed is not None else timedelta(0)
        self._log_on_failure = False
        self._sensitive_headers_and_cookies: list[str] = []

    def then(self) -> Self:
        return self

    def assert_that(self) -> Self:
        return self

    def and_(self) -> Self:
        return self

    def status_code(self, expected: int | HTTPStatus | Matcher | Any) -> Self:
        """Verify the status code.

        Args:
            expected: Exact code, an HTTPStatus (reported by name on failure) or a matcher

        Raises:
            ResponseVerificationError: If the status code does not match
        """
        actual = self.response.status_code

        match expected:
            case HTTPStatus():
                if expected.value != actual:
                    self._fail(f"Expected status code to be {expected.name}, but was {_status_name(actual)}")
            case int():
                if expected != actual:
                    self._fail(f"Expected status code to be {expected}, but was {actual}")
            case _:
                matcher = as_matcher(expected)
                if not matcher.matches(actual):
                    self._fail(f"Expected response status code to match '{matcher}', but was {actual}")

        return self

    def header(self, name: str, expected: str | Matcher | Any) -> Self:
        values = self.response.headers.get_list(name)
        if not values:
            self._fail(f"Expected header with name '{name}' to be in the response, but it could not be found.")

        actual = values[0]
        if isinstance(expected, str):
            if actual != expected:
                self._fail(f"Expected value for response header with name '{name}' to be '{expected}', but was '{actual}'.")
        else:
            matcher = as_matcher(expected)
            if not matcher.matches(actual):
                self._fail(f"Expected value for response header with name '{name}' to match '{matcher}', but was '{actual}'.")

        return self

    def content_type(self, expected: str | Matcher | Any) -> Self:
        actual = self.response.headers.get("content-type")
        if actual is None:
            self._fail("Response Content-Type header could not be found.")

        if isinstance(expected, str):
            if actual != expected:
                self._fail(f"Expected value for response Content-Type header to be '{expected}', but was '{actual}'.")
        else:
            matcher = as_matcher(expected)
            if not matcher.matches(actual):
                self._fail(f"Expected value for response Content-Type header to match '{matcher}', but was '{actual}'.")

        return self

    def cookie(self, name: str, expected: str | Matcher | Any) -> Self:
        cookie = find_cookie(self.cookies, name)
        if cookie is None:
            self._fail(f"Cookie with name '{name}' could not be found in the response.")

        actual = cookie.value
        if isinstance(expected, str):
            if actual != expected:
                self._fail(f"Expected value for cookie with name '{name}' to be '{expected}', but was '{actual}'.")
        else:
            matcher = as_matcher(expected)
            if not matcher.matches(actual):
                self._fail(f"Expected value for cookie with name '{name}' to match '{matcher}', but was '{actual}'.")

        return self

    def body(
        self,
        expected_or_path: str | Matcher | Any,
        matcher: Matcher | Any = None,
        verify_as: ContentTypeOverride = ContentTypeOverride.USE_RESPONSE_CONTENT_TYPE_HEADER_VALUE,
    ) -> Self:
        """Verify the whole body, or the element(s) selected by a path.

        body("text") and body(matcher) check the complete body. body(path, matcher)
        evaluates a JsonPath or XPath expression, chosen by the response Content-Type
        unless `verify_as` overrides it; collection matchers receive every match.
        """
        if matcher is None:
            return self._verify_whole_body(expected_or_path)
        return self._verify_path(expected_or_path, as_matcher(matcher), verify_as)

    def _verify_whole_body(self, expected: str | Matcher | Any) -> Self:
        actual = self.response.text

        if isinstance(expected, str):
            if actual != expected:
                self._fail(f"Actual response body did not match expected response body.\nExpected: '{expected}'\nActual: '{actual}'")
        else:
            matcher = as_matcher(expected)
            if not matcher.matches(actual):
                self._fail(f"Actual response body expected to match '{matcher}' but didn't.\nActual: '{actual}'")

        return self

    def _verify_path(self, path: str, matcher: Matcher, verify_as: ContentTypeOverride) -> Self:
        return_as = ReturnAs.LIST if matcher.is_collection_matcher else ReturnAs.SINGULAR

        with self._verifying():
            content_type, value = extract_from_response(self.response, path, verify_as, return_as)

        if content_type != SupportedContentType.JSON:
            value = self._coerce_text(value, matcher.value_type)

        if matcher.is_collection_matcher:
            if not matcher.matches(value):
                self._fail(f"Expected elements selected by '{path}' to match '{matcher}', but was {render_value(value)}")
        elif not matcher.matches(value):
            self._fail(f"Expected element selected by '{path}' to match '{matcher}' but was {render_value(value)}")

        return self

    def _coerce_text(self, value: str | list[str], value_type: type | None) -> Any:
        texts = value if isinstance(value, list) else [value]
        converted = []
        for text in texts:
            try:
                converted.append(coerce(text, value_type))
            except ValueError:
                self._fail(f"Response element value '{text}' cannot be converted to value of type '{value_type.__name__}'")
        return converted if isinstance(value, list) else converted[0]

    def matches_json_schema(self, schema: str | dict[str, Any]) -> Self:
        with self._verifying():
            require_content_type(media_type(self.response), "json")
            validate_json_schema(self.response.text, schema)
        return self

    def matches_xsd(self, xsd: str | bytes | etree.XMLSchema) -> Self:
        with self._verifying():
            require_content_type(media_type(self.response), "xml")
            validate_xsd(self.response.content, xsd)
        return self

    def matches_inline_dtd(self) -> Self:
        with self._verifying():
            require_content_type(media_type(self.response), "xml")
            validate_inline_dtd(self.response.content)
        return self

    def response_body_length(self, matcher: Matcher | Any) -> Self:
        matcher = as_matcher(matcher)
        length = len(self.response.text)
        if not matcher.matches(length):
            self._fail(f"Expected response body length to match '{matcher}' but was '{length}'")
        return self

    def response_time(self, matcher: Matcher | Any) -> Self:
        matcher = as_matcher(matcher)
        if not matcher.matches(self.elapsed):
            self._fail(f"Expected response time to match '{matcher}' but was '{self.elapsed}'")
        return self

    def deserialize_to(
        self,
        target_type: Any,
        deserialize_as: DeserializeAs = DeserializeAs.USE_RESPONSE_CONTENT_TYPE_HEADER_VALUE,
    ) -> Any:
        """Validate the whole response body into `target_type`.

        Args:
            target_type: Any type pydantic can validate, such as a model, dataclass or list[...]
            deserialize_as: Override for the response Content-Type header

        Returns:
            The validated value

        Raises:
            DeserializationError: If the body is empty, of an unsupported type or does not fit `target_type`
        """
        return deserialize_response(self.response, target_type, deserialize_as)

    def log(self, level: ResponseLogLevel, sensitive_header_or_cookie_names: list[str] | None = None) -> Self:
        sensitive = sensitive_header_or_cookie_names or []
        if level == ResponseLogLevel.ON_VERIFICATION_FAILURE:
            return self.log_on_verification_failure(sensitive)

        log_response(self.response, self.cookies, self.elapsed, level, sensitive)
        return self

    def log_on_verification_failure(self, sensitive_header_or_cookie_names: list[str] | None = None) -> Self:
        self._log_on_failure = True
        self._sensitive_headers_and_cookies.extend(sensitive_header_or_cookie_names or [])
        return self

    def extract(self) -> ExtractableResponse:
        """Switch from verification to value extraction on the same response."""
        return ExtractableResponse(self.response, self.cookies, self.elapsed)

    @contextmanager
    def _verifying(self) -> Iterator[None]:
        try:
            yield
        except (ResponseVerificationError, ExtractionError) as e:
            self._fail(str(e))

    def _fail(self, message: str) -> NoReturn:
        if self._log_on_failure:
            log_response(self.response, self.cookies, self.elapsed, ResponseLogLevel.ALL, self._sensitive_headers_and_cookies)
        logger.debug(f"Verification failed: {message}")
        raise ResponseVerificationError(message) from None

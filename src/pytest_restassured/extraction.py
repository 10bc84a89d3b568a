import io
from datetime import timedelta
from http.cookiejar import Cookie
from typing import Any

import httpx

from .constants import DeserializeAs, ExtractAs, ReturnAs
from .deserialization import deserialize_response
from .exceptions import ExtractionError
from .path_extractor import extract_from_response


def find_cookie(cookies: httpx.Cookies, name: str) -> Cookie | None:
    """Return the first cookie whose name matches case-insensitively."""
    lowered = name.lower()
    for cookie in cookies.jar:
        if cookie.name.lower() == lowered:
            return cookie
    return None


class ExtractableResponse:
    """Pulls values out of a buffered response for use later in a test."""

    def __init__(self, response: httpx.Response, cookies: httpx.Cookies, elapsed: timedelta):
        self._response = response
        self._cookies = cookies
        self._elapsed = elapsed

    def body_as_string(self) -> str:
        return self._response.text

    def body_as_bytes(self) -> bytes:
        return self._response.content

    def body_as_stream(self) -> io.BytesIO:
        return io.BytesIO(self._response.content)

    def body(
        self,
        path: str,
        extract_as: ExtractAs = ExtractAs.USE_RESPONSE_CONTENT_TYPE_HEADER_VALUE,
        return_as: ReturnAs = ReturnAs.SINGULAR,
    ) -> Any:
        """Evaluate a JsonPath or XPath expression against the response body.

        JSON results keep their native types. XML and HTML results are the text
        content of the selected nodes. A single match is returned unwrapped
        unless `return_as` is LIST; several matches are returned as a list.

        Raises:
            ExtractionError: If the body format is unsupported or nothing matches.
        """
        _, value = extract_from_response(self._response, path, extract_as, return_as)
        return value

    def header(self, name: str) -> str:
        values = self._response.headers.get_list(name)
        if not values:
            raise ExtractionError(f"Header with name '{name}' could not be found in the response.")
        return values[0]

    def cookie(self, name: str) -> str:
        cookie = find_cookie(self._cookies, name)
        if cookie is None:
            raise ExtractionError(f"Cookie with name '{name}' could not be found in the response.")
        return cookie.value or ""

    def response(self) -> httpx.Response:
        return self._response

    def response_time(self) -> timedelta:
        return self._elapsed

    def as_(self, target_type: Any, deserialize_as: DeserializeAs = DeserializeAs.USE_RESPONSE_CONTENT_TYPE_HEADER_VALUE) -> Any:
        return deserialize_response(self._response, target_type, deserialize_as)

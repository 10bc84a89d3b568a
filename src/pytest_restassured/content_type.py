import httpx

from .constants import ContentTypeOverride, SupportedContentType
from .exceptions import ExtractionError, ResponseVerificationError

_OVERRIDES = {
    ContentTypeOverride.JSON: SupportedContentType.JSON,
    ContentTypeOverride.XML: SupportedContentType.XML,
    ContentTypeOverride.HTML: SupportedContentType.HTML,
}

# order matters: the first substring found decides
_SNIFF_RULES = (
    ("json", SupportedContentType.JSON),
    ("xml", SupportedContentType.XML),
    ("html", SupportedContentType.HTML),
)


def media_type(response: httpx.Response) -> str:
    """Return the declared media type of a response without parameters, or an empty string."""
    content_type = response.headers.get("content-type")
    if content_type is None:
        return ""
    return content_type.split(";", 1)[0].strip()


def resolve_content_type(
    declared_content_type: str | None,
    override: ContentTypeOverride = ContentTypeOverride.USE_RESPONSE_CONTENT_TYPE_HEADER_VALUE,
) -> SupportedContentType:
    """Decide how a response body should be interpreted.

    An explicit override always wins, even when it contradicts the declared header.
    An empty or absent declared type defaults to JSON. Otherwise the declared type is
    searched case-insensitively for "json", "xml" and "html", in that order.

    Raises:
        ExtractionError: If the declared type matches none of the supported formats.
    """
    if override != ContentTypeOverride.USE_RESPONSE_CONTENT_TYPE_HEADER_VALUE:
        return _OVERRIDES[ContentTypeOverride(override)]

    declared = declared_content_type or ""
    if declared == "":
        return SupportedContentType.JSON

    lowered = declared.lower()
    for needle, supported in _SNIFF_RULES:
        if needle in lowered:
            return supported

    raise ExtractionError(f"Unable to extract elements from response with Content-Type '{declared}'")


def require_content_type(declared_content_type: str | None, expected: str) -> None:
    """Gate used by schema validation: the declared type must contain `expected`."""
    declared = declared_content_type or ""
    if expected not in declared.lower():
        raise ResponseVerificationError(f"Expected response Content-Type header to contain '{expected}', but was '{declared}'")

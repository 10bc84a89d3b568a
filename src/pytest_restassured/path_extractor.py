"""Path evaluation against response bodies.

JSON bodies are queried with JsonPath (jsonpath-ng), XML and HTML bodies with
XPath (lxml). JSON results keep their native types, XML and HTML results are
always the text content of the selected nodes.
"""

import json
import logging
from functools import lru_cache
from typing import Any

import httpx
import lxml.html
from jsonpath_ng import JSONPath
from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError
from jsonpath_ng.ext import parse as jsonpath_parse
from lxml import etree

from .constants import ContentTypeOverride, ReturnAs, SupportedContentType
from .content_type import media_type, resolve_content_type
from .exceptions import ExtractionError

logger = logging.getLogger(__name__)

PATH_KINDS = {
    SupportedContentType.JSON: "JsonPath",
    SupportedContentType.XML: "XPath",
    SupportedContentType.HTML: "XPath",
}


def xml_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True)


@lru_cache(maxsize=256)
def _compile_jsonpath(path: str) -> JSONPath:
    try:
        return jsonpath_parse(path)
    except (JsonPathLexerError, JsonPathParserError) as e:
        raise ExtractionError(f"Invalid JsonPath expression '{path}': {e}") from None


def _json_values(body: str | bytes, path: str) -> list[Any]:
    try:
        document = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ExtractionError(f"Could not parse response body as JSON: {e}") from None

    return [match.value for match in _compile_jsonpath(path).find(document)]


def _node_text(node: Any) -> str:
    if etree.iselement(node):
        return "".join(node.itertext())
    return str(node)


def _xpath_values(tree: Any, path: str) -> list[str]:
    try:
        result = tree.xpath(path)
    except etree.XPathError as e:
        raise ExtractionError(f"Invalid XPath expression '{path}': {e}") from None

    match result:
        case list():
            return [_node_text(node) for node in result]
        case bool():
            return ["true" if result else "false"]
        case float() if result.is_integer():
            return [str(int(result))]
        case _:
            return [str(result)]


def _xml_values(body: str | bytes, path: str) -> list[str]:
    if isinstance(body, str):
        body = body.encode("utf-8")
    try:
        root = etree.fromstring(body, parser=xml_parser())
    except etree.XMLSyntaxError as e:
        raise ExtractionError(f"Could not parse response body as XML: {e}") from None
    return _xpath_values(root.getroottree(), path)


def _html_values(body: str | bytes, path: str) -> list[str]:
    try:
        document = lxml.html.document_fromstring(body)
    except (etree.ParserError, ValueError) as e:
        raise ExtractionError(f"Could not parse response body as HTML: {e}") from None
    return _xpath_values(document.getroottree(), path)


def extract(
    body: str | bytes,
    content_type: SupportedContentType,
    path: str,
    return_as: ReturnAs = ReturnAs.SINGULAR,
) -> Any:
    """Evaluate `path` against `body` interpreted as `content_type`.

    Returns the single matching value in SINGULAR mode when exactly one node
    matches, otherwise the ordered list of matching values. LIST mode always
    returns a list.

    Raises:
        ExtractionError: If the body cannot be parsed, the expression is invalid,
            or nothing matches.
    """
    match content_type:
        case SupportedContentType.JSON:
            values = _json_values(body, path)
        case SupportedContentType.XML:
            values = _xml_values(body, path)
        case SupportedContentType.HTML:
            values = _html_values(body, path)
        case _:
            raise ExtractionError(f"Unsupported content type '{content_type}'")

    logger.debug(f"{PATH_KINDS[content_type]} '{path}' yielded {len(values)} result(s)")

    if not values:
        raise ExtractionError(f"{PATH_KINDS[content_type]} expression '{path}' did not yield any results.")

    if return_as == ReturnAs.SINGULAR and len(values) == 1:
        return values[0]
    return values


def extract_from_response(
    response: httpx.Response,
    path: str,
    override: ContentTypeOverride = ContentTypeOverride.USE_RESPONSE_CONTENT_TYPE_HEADER_VALUE,
    return_as: ReturnAs = ReturnAs.SINGULAR,
) -> tuple[SupportedContentType, Any]:
    """Resolve the body format of a buffered response and evaluate `path` against it."""
    content_type = resolve_content_type(media_type(response), override)
    # XML carries its own encoding declaration, so hand lxml the raw bytes
    body = response.content if content_type == SupportedContentType.XML else response.text
    return content_type, extract(body, content_type, path, return_as)

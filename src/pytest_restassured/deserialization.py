import logging
from typing import Any

import httpx
from lxml import etree
from pydantic import TypeAdapter, ValidationError

from .constants import DeserializeAs
from .content_type import media_type
from .exceptions import DeserializationError
from .xml_body import xml_to_dict

logger = logging.getLogger(__name__)


def deserialize_response(
    response: httpx.Response,
    target_type: Any,
    deserialize_as: DeserializeAs = DeserializeAs.USE_RESPONSE_CONTENT_TYPE_HEADER_VALUE,
) -> Any:
    """Validate the response body into `target_type`.

    JSON bodies are validated directly. XML bodies are converted to a dict first
    and the content of the root element is validated, so the root element plays
    the role of the target type itself.
    """
    if not response.content:
        raise DeserializationError("Response content is null or empty.")

    match deserialize_as:
        case DeserializeAs.JSON:
            declared = "application/json"
        case DeserializeAs.XML:
            declared = "application/xml"
        case _:
            declared = media_type(response)

    adapter = TypeAdapter(target_type)
    lowered = declared.lower()

    try:
        if declared == "" or "json" in lowered:
            return adapter.validate_json(response.content)
        if "xml" in lowered:
            try:
                document = xml_to_dict(response.content)
            except etree.XMLSyntaxError as e:
                raise DeserializationError(f"Could not parse response body as XML: {e}") from None
            root_content = next(iter(document.values()))
            return adapter.validate_python(root_content)
    except ValidationError as e:
        logger.debug(f"Deserialization into {target_type!r} failed with {e.error_count()} error(s)")
        raise DeserializationError(f"Could not deserialize response body into {getattr(target_type, '__name__', target_type)}: {e}") from None

    raise DeserializationError(f"Unable to deserialize response with Content-Type '{declared}'")

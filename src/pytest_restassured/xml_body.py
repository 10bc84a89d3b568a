"""XML conversion for request bodies and response deserialization.

Structured request bodies are serialized to XML with the root element named
after the model class (pydantic models, dataclasses) or the single top-level
dict key. Response bodies are converted to plain dicts so that pydantic can
validate them into the requested type.
"""

import dataclasses
from typing import Any

from lxml import etree
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from .path_extractor import xml_parser


def _strip_ns(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def xml_to_dict(xml_bytes: bytes) -> dict[str, Any]:
    """Convert XML bytes into a dict with the root tag as the single top-level key.

    Repeated child elements become lists, text-only leaves become strings,
    attributes become `@name` keys and empty elements become None.

    Raises:
        etree.XMLSyntaxError: If *xml_bytes* is not well-formed XML.
    """
    root = etree.fromstring(xml_bytes, parser=xml_parser())
    return {_strip_ns(root.tag): _element_to_dict(root)}


def _element_to_dict(element: etree._Element) -> dict[str, Any] | str | None:
    result: dict[str, Any] = {}

    for attr_name, attr_value in element.attrib.items():
        result[f"@{_strip_ns(attr_name)}"] = attr_value

    children_by_tag: dict[str, list[Any]] = {}
    for child in element:
        if not isinstance(child.tag, str):
            # comments and processing instructions
            continue
        children_by_tag.setdefault(_strip_ns(child.tag), []).append(_element_to_dict(child))

    for tag, values in children_by_tag.items():
        result[tag] = values if len(values) > 1 else values[0]

    text = (element.text or "").strip()
    if text:
        if result:
            result["#text"] = text
        else:
            return text

    if not result:
        return None

    return result


def root_name(value: Any) -> str:
    if isinstance(value, BaseModel) or dataclasses.is_dataclass(value):
        return type(value).__name__
    if isinstance(value, dict) and len(value) == 1:
        return str(next(iter(value)))
    raise ValueError(f"Cannot determine XML root element for value of type {type(value).__name__}")


def to_xml(value: Any, encoding: str = "utf-8") -> str:
    """Serialize a model, dataclass or single-key dict to an XML document string."""
    name = root_name(value)
    if isinstance(value, dict):
        content = to_jsonable_python(value[name])
    else:
        content = to_jsonable_python(value)

    root = _value_to_element(name, content)
    return etree.tostring(root, encoding=encoding, xml_declaration=True, pretty_print=True).decode(encoding)


def _value_to_element(tag: str, value: Any) -> etree._Element:
    element = etree.Element(tag)

    match value:
        case None:
            pass
        case dict():
            for key, child_value in value.items():
                if key == "#text":
                    element.text = str(child_value)
                elif key.startswith("@"):
                    element.set(key[1:], str(child_value))
                elif isinstance(child_value, list):
                    for item in child_value:
                        element.append(_value_to_element(key, item))
                else:
                    element.append(_value_to_element(key, child_value))
        case list():
            for item in value:
                element.append(_value_to_element("item", item))
        case bool():
            element.text = "true" if value else "false"
        case _:
            element.text = str(value)

    return element

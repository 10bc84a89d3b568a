import json
import logging
from typing import Any

import jsonschema
from jsonschema.protocols import Validator
from lxml import etree

from .exceptions import ResponseVerificationError
from .path_extractor import xml_parser

logger = logging.getLogger(__name__)


def json_schema_validator(schema: dict[str, Any]) -> type[Validator]:
    # Default to Draft 7 for unknown versions
    schema_uri = schema.get("$schema", "http://json-schema.org/draft-07/schema#")

    if "draft-03" in schema_uri or "draft-3" in schema_uri:
        validator = jsonschema.Draft3Validator
    elif "draft-04" in schema_uri or "draft-4" in schema_uri:
        validator = jsonschema.Draft4Validator
    elif "draft-06" in schema_uri or "draft-6" in schema_uri:
        validator = jsonschema.Draft6Validator
    elif "2019-09" in schema_uri:
        validator = jsonschema.Draft201909Validator
    elif "2020-12" in schema_uri:
        validator = jsonschema.Draft202012Validator
    else:
        validator = jsonschema.Draft7Validator

    validator.check_schema(schema)
    return validator


def load_json_schema(schema: str | dict[str, Any]) -> tuple[dict[str, Any], type[Validator]]:
    """Parse and check a JSON schema supplied as text or as an already parsed dict."""
    if isinstance(schema, str):
        try:
            schema = json.loads(schema)
        except json.JSONDecodeError as e:
            raise ResponseVerificationError(f"Could not parse supplied JSON schema: {e}") from None

    if not isinstance(schema, dict):
        raise ResponseVerificationError(f"Could not parse supplied JSON schema: expected an object, got {type(schema).__name__}")

    try:
        validator = json_schema_validator(schema)
    except jsonschema.SchemaError as e:
        raise ResponseVerificationError(f"Could not parse supplied JSON schema: {e.message}") from None

    return schema, validator


def validate_json_schema(body: str, schema: str | dict[str, Any]) -> None:
    parsed_schema, validator = load_json_schema(schema)

    try:
        instance = json.loads(body)
    except json.JSONDecodeError as e:
        raise ResponseVerificationError(f"Response body did not match JSON schema supplied: response is not valid JSON ({e})") from None

    first_error = next(iter(validator(parsed_schema).iter_errors(instance)), None)
    if first_error is not None:
        logger.debug(f"JSON schema validation failed at {first_error.json_path}")
        raise ResponseVerificationError(f"Response body did not match JSON schema supplied: {first_error.message}")


def load_xml_schema(xsd: str | bytes | etree.XMLSchema) -> etree.XMLSchema:
    """Compile an XSD supplied as text, or pass through an already compiled schema."""
    if isinstance(xsd, etree.XMLSchema):
        return xsd
    if isinstance(xsd, str):
        xsd = xsd.encode("utf-8")

    try:
        return etree.XMLSchema(etree.fromstring(xsd, parser=xml_parser()))
    except (etree.XMLSyntaxError, etree.XMLSchemaParseError) as e:
        raise ResponseVerificationError(f"Could not parse supplied XML schema. Error: {e}") from None


def validate_xsd(body: bytes, xsd: str | bytes | etree.XMLSchema) -> None:
    schema = load_xml_schema(xsd)

    try:
        document = etree.fromstring(body, parser=xml_parser())
        schema.assertValid(document)
    except (etree.XMLSyntaxError, etree.DocumentInvalid) as e:
        raise ResponseVerificationError(f"Response body did not match XML schema supplied. Error: '{e}'") from None


def validate_inline_dtd(body: bytes) -> None:
    parser = etree.XMLParser(dtd_validation=True, resolve_entities=False, no_network=True)

    try:
        etree.fromstring(body, parser=parser)
    except etree.XMLSyntaxError as e:
        raise ResponseVerificationError(f"Response body did not match inline DTD. Error: '{e}'") from None

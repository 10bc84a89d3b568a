from enum import IntEnum, StrEnum


class ConfigOptions(StrEnum):
    """Configuration option names for the pytest-restassured plugin."""

    REQUEST_LOG_LEVEL = "restassured_request_log_level"
    RESPONSE_LOG_LEVEL = "restassured_response_log_level"
    DISABLE_SSL_CERTIFICATE_VALIDATION = "restassured_disable_ssl_certificate_validation"
    TIMEOUT = "restassured_timeout"


class ContentTypeOverride(StrEnum):
    """How to interpret a response body when verifying or extracting from it."""

    USE_RESPONSE_CONTENT_TYPE_HEADER_VALUE = "use_response_content_type_header_value"
    JSON = "json"
    XML = "xml"
    HTML = "html"


VerifyAs = ContentTypeOverride
ExtractAs = ContentTypeOverride


class DeserializeAs(StrEnum):
    USE_RESPONSE_CONTENT_TYPE_HEADER_VALUE = "use_response_content_type_header_value"
    JSON = "json"
    XML = "xml"


class SupportedContentType(StrEnum):
    JSON = "json"
    XML = "xml"
    HTML = "html"


class ReturnAs(StrEnum):
    SINGULAR = "singular"
    LIST = "list"


class RequestLogLevel(IntEnum):
    NONE = 0
    ENDPOINT = 1
    HEADERS = 2
    BODY = 3
    ALL = 4


class ResponseLogLevel(IntEnum):
    NONE = 0
    HEADERS = 1
    BODY = 2
    RESPONSE_TIME = 3
    ALL = 4
    ON_ERROR = 5
    ON_VERIFICATION_FAILURE = 6


DEFAULT_CONTENT_TYPE = "application/json"
DEFAULT_CONTENT_ENCODING = "utf-8"
DEFAULT_TIMEOUT_SECONDS = 100.0
MASK = "*****"

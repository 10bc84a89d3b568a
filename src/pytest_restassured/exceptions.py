class RestAssuredError(Exception):
    pass


class ResponseVerificationError(RestAssuredError):
    """An assertion about the response did not hold."""


class ExtractionError(RestAssuredError):
    """A requested value could not be located in the response."""


class RequestCreationError(RestAssuredError):
    """The request could not be built before dispatch."""


class DeserializationError(RestAssuredError):
    """The response body could not be turned into the requested type."""


class HttpRequestProcessorError(RestAssuredError):
    """The request could not be sent or no response was received."""


class RequestTimeoutError(HttpRequestProcessorError):
    pass


VerificationError = ResponseVerificationError
TransportError = HttpRequestProcessorError

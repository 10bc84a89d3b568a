from datetime import timedelta
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from .constants import RequestLogLevel, ResponseLogLevel

PositiveTimedelta = Annotated[timedelta, Field(gt=timedelta(0))]


class LogConfiguration(BaseModel):
    request_log_level: RequestLogLevel = Field(default=RequestLogLevel.NONE, description="Request details to log before dispatch.")
    response_log_level: ResponseLogLevel = Field(default=ResponseLogLevel.NONE, description="Response details to log after dispatch.")
    sensitive_request_headers_and_cookies: list[str] = Field(default_factory=list, description="Request header and cookie names to mask.")
    sensitive_response_headers_and_cookies: list[str] = Field(default_factory=list, description="Response header and cookie names to mask.")
    model_config = ConfigDict(extra="forbid")


class RestAssuredConfiguration(BaseModel):
    disable_ssl_certificate_validation: bool = Field(default=False, description="Skip TLS certificate verification.")
    log_configuration: LogConfiguration = Field(default_factory=LogConfiguration)
    timeout: PositiveTimedelta | None = Field(default=None, description="Default request timeout.")
    model_config = ConfigDict(extra="forbid")

from datetime import timedelta

import pytest
from pydantic import ValidationError

from pytest_restassured.config import LogConfiguration, RestAssuredConfiguration
from pytest_restassured.constants import RequestLogLevel
from pytest_restassured.exceptions import RequestCreationError
from pytest_restassured.specification import RequestSpecBuilder, RequestSpecification


class TestRequestSpecBuilder:
    def test_defaults(self):
        specification = RequestSpecBuilder().build()

        assert specification.scheme == "http"
        assert specification.host_name == "localhost"
        assert specification.port is None
        assert specification.timeout is None

    def test_base_uri(self):
        specification = RequestSpecBuilder().with_base_uri("https://api.example.com:8443").build()

        assert specification.scheme == "https"
        assert specification.host_name == "api.example.com"
        assert specification.port == 8443

    def test_base_uri_default_port(self):
        assert RequestSpecBuilder().with_base_uri("https://api.example.com").build().port is None

    @pytest.mark.parametrize("base_uri", ["not a uri", "/relative/path", "localhost"])
    def test_invalid_base_uri(self, base_uri):
        with pytest.raises(RequestCreationError, match=f"^Supplied value '{base_uri}' is not a valid URI$"):
            RequestSpecBuilder().with_base_uri(base_uri)

    def test_query_params_keep_repeated_keys(self):
        specification = RequestSpecBuilder().with_query_param("id", 1, 2).with_query_param("name", "x").build()
        assert specification.query_params == [("id", "1"), ("id", "2"), ("name", "x")]

    def test_auth(self):
        assert RequestSpecBuilder().with_basic_auth("u", "p").build().authorization == "Basic dTpw"
        assert RequestSpecBuilder().with_oauth2("token").build().authorization == "Bearer token"

    def test_headers_and_user_agent(self):
        specification = RequestSpecBuilder().with_header("X-Version", 2).with_user_agent("restassured", "1.0").build()

        assert specification.headers == {"X-Version": "2"}
        assert specification.user_agent == "restassured/1.0"

    def test_masking_and_logging(self):
        log_configuration = LogConfiguration(request_log_level=RequestLogLevel.ALL)
        specification = (
            RequestSpecBuilder()
            .with_log_configuration(log_configuration)
            .with_masking_of_headers_and_cookies(["Authorization"])
            .with_masking_of_headers_and_cookies(["session"])
            .build()
        )

        assert specification.log_configuration == log_configuration
        assert specification.sensitive_request_headers_and_cookies == ["Authorization", "session"]

    def test_non_positive_timeout_rejected_on_build(self):
        with pytest.raises(ValidationError):
            RequestSpecBuilder().with_timeout(timedelta(0)).build()


class TestBuildUrl:
    def test_base_path_and_endpoint(self):
        specification = RequestSpecBuilder().with_base_uri("http://localhost:9876").with_base_path("/api/").build()
        assert str(specification.build_url("/places")) == "http://localhost:9876/api/places"

    def test_without_base_path(self):
        specification = RequestSpecBuilder().with_base_uri("http://localhost:9876").build()
        assert str(specification.build_url("places")) == "http://localhost:9876/places"

    def test_port_override(self):
        specification = RequestSpecBuilder().with_base_uri("http://localhost").with_port(8080).build()
        assert str(specification.build_url("/x")) == "http://localhost:8080/x"


class TestConfiguration:
    def test_defaults(self):
        config = RestAssuredConfiguration()

        assert config.disable_ssl_certificate_validation is False
        assert config.timeout is None
        assert config.log_configuration.request_log_level == RequestLogLevel.NONE

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            RestAssuredConfiguration(retries=3)

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValidationError):
            RestAssuredConfiguration(timeout=timedelta(seconds=-1))

    def test_specification_is_plain_model(self):
        assert RequestSpecification(base_path="api").base_path == "api"

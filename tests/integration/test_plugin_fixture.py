CLIENT_SETUP = """
import httpx
import pytest


def handler(request):
    return httpx.Response(200, json={"name": "Sun City", "inhabitants": 100000})


@pytest.fixture
def client():
    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        yield client
"""


def test_failed_test_report_has_http_exchange(pytester):
    pytester.makeconftest(CLIENT_SETUP)
    pytester.makepyfile(
        """
        def test_passes(given, client):
            given(http_client=client).get("http://localhost/places/1").then().status_code(200)


        def test_fails(given, client):
            given(http_client=client).get("http://localhost/places/1").then().status_code(404)
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=1, failed=1)
    result.stdout.fnmatch_lines(
        [
            "*Expected status code to be 404, but was 200*",
            "*HTTP Request*",
            "GET http://localhost/places/1",
            "*HTTP Response*",
            "HTTP 200 (OK)",
        ]
    )


def test_passing_test_report_has_no_http_exchange(pytester):
    pytester.makeconftest(CLIENT_SETUP)
    pytester.makepyfile(
        """
        def test_passes(given, client):
            given(http_client=client).get("http://localhost/places/1").then().status_code(200)
        """
    )

    result = pytester.runpytest("-rA")

    result.assert_outcomes(passed=1)
    result.stdout.no_fnmatch_line("*HTTP Response*")


def test_ini_log_levels_apply_to_fixture(pytester):
    pytester.makeini(
        """
        [pytest]
        restassured_request_log_level = endpoint
        restassured_response_log_level = ALL
        """
    )
    pytester.makeconftest(CLIENT_SETUP)
    pytester.makepyfile(
        """
        import logging


        def test_logs(given, client, caplog):
            caplog.set_level(logging.INFO, logger="pytest_restassured.logger")

            given(http_client=client).get("http://localhost/places/1")

            assert caplog.messages[0] == "GET http://localhost/places/1"
            assert "HTTP 200 (OK)" in caplog.messages
            assert any('"name": "Sun City"' in message for message in caplog.messages)
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=1)


def test_ini_timeout_applies_to_fixture(pytester):
    pytester.makeini(
        """
        [pytest]
        restassured_timeout = 0.5
        """
    )
    pytester.makepyfile(
        """
        import httpx
        import pytest

        from pytest_restassured import RequestTimeoutError


        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)


        def test_timeout(given):
            client = httpx.Client(transport=httpx.MockTransport(handler))
            with pytest.raises(RequestTimeoutError, match="Request timeout of 0:00:00.500000 exceeded."):
                given(http_client=client).get("http://localhost/slow")
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=1)


def test_invalid_ini_value_is_reported(pytester):
    pytester.makeini(
        """
        [pytest]
        restassured_response_log_level = LOUD
        """
    )
    pytester.makepyfile("def test_nothing(): pass")

    result = pytester.runpytest()

    assert result.ret != 0
    assert "restassured_response_log_level must be one of" in result.stdout.str() + result.stderr.str()

import httpx
import pytest

pytest_plugins = ["pytester"]

LOCATION_JSON = """{
  "Country": "United States",
  "Places": [
    {"Name": "Sun City", "Inhabitants": 100000, "IsCapital": true},
    {"Name": "Pleasure Meadow", "Inhabitants": 50000, "IsCapital": false}
  ]
}"""

LOCATION_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Location>
  <Country>United States</Country>
  <Places>
    <Place><Name>Sun City</Name><Inhabitants>100000</Inhabitants><IsCapital>true</IsCapital></Place>
    <Place><Name>Pleasure Meadow</Name><Inhabitants>50000</Inhabitants><IsCapital>false</IsCapital></Place>
  </Places>
</Location>"""

LOCATION_HTML = """<html>
  <head><title>Places</title></head>
  <body>
    <ul>
      <li class="place">Sun City</li>
      <li class="place">Pleasure Meadow</li>
    </ul>
  </body>
</html>"""


@pytest.fixture
def make_response():
    """Build a buffered httpx.Response the way the executor hands it over."""

    def _make_response(
        body: str | bytes = "",
        status_code: int = 200,
        content_type: str | None = "application/json",
        headers: list[tuple[str, str]] | None = None,
        url: str = "https://example.com/api/location",
    ) -> httpx.Response:
        all_headers = list(headers or [])
        if content_type is not None:
            all_headers.insert(0, ("Content-Type", content_type))
        content = body.encode("utf-8") if isinstance(body, str) else body
        return httpx.Response(status_code, headers=all_headers, content=content, request=httpx.Request("GET", url))

    return _make_response


@pytest.fixture
def location_json() -> str:
    return LOCATION_JSON


@pytest.fixture
def location_xml() -> str:
    return LOCATION_XML


@pytest.fixture
def location_html() -> str:
    return LOCATION_HTML

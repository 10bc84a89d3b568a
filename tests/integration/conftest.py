import httpx
import pytest


def echo(request: httpx.Request) -> httpx.Response:
    """Reflect the received request back as JSON."""
    if request.url.path == "/set-cookie":
        return httpx.Response(200, headers={"Set-Cookie": "server_cookie=xyz; Path=/"}, json={})
    if request.url.path == "/reflect":
        return httpx.Response(200, headers={"Content-Type": request.headers["Content-Type"]}, content=request.content)

    return httpx.Response(
        200,
        json={
            "method": request.method,
            "url": str(request.url),
            "path": request.url.path,
            "query": request.url.query.decode("ascii"),
            "headers": {name.replace("-", "_"): value for name, value in request.headers.items()},
            "body": request.content.decode("utf-8", errors="replace"),
            "timeout": request.extensions.get("timeout", {}).get("read"),
        },
    )


@pytest.fixture
def echo_client():
    with httpx.Client(transport=httpx.MockTransport(echo)) as client:
        yield client


@pytest.fixture
def failing_client():
    """Client whose transport raises the exception passed to the factory."""
    clients = []

    def _failing_client(exception_type: type[httpx.TransportError]) -> httpx.Client:
        def handler(request: httpx.Request) -> httpx.Response:
            raise exception_type("connection refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _failing_client

    for client in clients:
        client.close()

"""Formatting utilities for request/response logging and test reports.

This module renders httpx requests and responses as human-readable text, with
sensitive header and cookie values masked.
"""

import json
from collections.abc import Collection
from datetime import timedelta
from http.cookiejar import Cookie

import httpx
from lxml import etree

from .constants import MASK
from .path_extractor import xml_parser

TRUNCATED_SUFFIX = "... (truncated)"


def _is_sensitive(name: str, sensitive: Collection[str]) -> bool:
    return name.lower() in {s.lower() for s in sensitive}


def format_headers(headers: httpx.Headers, sensitive: Collection[str] = ()) -> list[str]:
    lines = []
    for name, value in headers.multi_items():
        lines.append(f"{name}: {MASK if _is_sensitive(name, sensitive) else value}")
    return lines


def _is_http_only(cookie: Cookie) -> bool:
    return cookie.has_nonstandard_attr("HttpOnly") or cookie.has_nonstandard_attr("httponly")


def format_cookies(cookies: httpx.Cookies | None, sensitive: Collection[str] = ()) -> list[str]:
    if cookies is None:
        return []
    lines = []
    for cookie in cookies.jar:
        value = MASK if _is_sensitive(cookie.name, sensitive) else cookie.value
        lines.append(f"Cookie: {cookie.name}={value}, Domain: {cookie.domain}, HTTP-only: {_is_http_only(cookie)}, Secure: {cookie.secure}")
    return lines


def format_body(content: bytes, content_type: str, max_length: int | None = None) -> str | None:
    if not content:
        return None

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        return f"<Binary content: {len(content)} bytes>"

    media = content_type.split(";", 1)[0].strip().lower()
    if media == "" or "json" in media:
        try:
            text = json.dumps(json.loads(text), indent=2, ensure_ascii=False)
        except json.JSONDecodeError:
            pass
    elif "xml" in media:
        try:
            text = etree.tostring(etree.fromstring(content, parser=xml_parser()), pretty_print=True, encoding="unicode")
        except etree.XMLSyntaxError:
            pass

    if max_length is not None and len(text) > max_length:
        text = text[:max_length] + TRUNCATED_SUFFIX
    return text


def request_content(request: httpx.Request) -> bytes:
    try:
        return request.content
    except httpx.RequestNotRead:
        # multipart uploads are streamed, buffer them for display
        return request.read()


def format_endpoint(request: httpx.Request) -> str:
    return f"{request.method} {request.url}"


def format_status_line(response: httpx.Response) -> str:
    return f"HTTP {response.status_code} ({response.reason_phrase})"


def format_elapsed(elapsed: timedelta) -> str:
    return f"Response time: {elapsed.total_seconds() * 1000} ms"


def format_request(
    request: httpx.Request,
    cookies: httpx.Cookies | None = None,
    sensitive: Collection[str] = (),
    max_length: int | None = 1000,
) -> str:
    lines = [format_endpoint(request)]
    lines.extend(format_headers(request.headers, sensitive))
    lines.extend(format_cookies(cookies, sensitive))

    body = format_body(request_content(request), request.headers.get("content-type", ""), max_length)
    if body is not None:
        lines.append("")
        lines.append(body)

    return "\n".join(lines)


def format_response(
    response: httpx.Response,
    cookies: httpx.Cookies | None = None,
    elapsed: timedelta | None = None,
    sensitive: Collection[str] = (),
    max_length: int | None = 1000,
) -> str:
    lines = [format_status_line(response)]
    lines.extend(format_headers(response.headers, sensitive))
    lines.extend(format_cookies(cookies, sensitive))
    if elapsed is not None:
        lines.append(format_elapsed(elapsed))

    body = format_body(response.content, response.headers.get("content-type", ""), max_length)
    if body is not None:
        lines.append("")
        lines.append(body)

    return "\n".join(lines)

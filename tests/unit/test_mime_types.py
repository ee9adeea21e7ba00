"""
Unit tests for MIME type lookup and status phrases.
"""

import pytest

from rangeserver.http.mime_types import get_content_type, get_mime_type, is_text_type
from rangeserver.http.status_codes import HTTPStatus


@pytest.mark.parametrize("extension,expected", [
    ("mp4", "video/mp4"),
    ("MP4", "video/mp4"),
    (".html", "text/html"),
    ("png", "image/png"),
    ("", "application/octet-stream"),
    ("unknownext", "application/octet-stream"),
])
def test_get_mime_type(extension, expected):
    assert get_mime_type(extension) == expected


def test_text_types_get_charset():
    assert get_content_type("html") == "text/html; charset=utf-8"
    assert get_content_type("json") == "application/json; charset=utf-8"
    assert get_content_type("mp4") == "video/mp4"
    assert get_content_type("") == "application/octet-stream"


def test_is_text_type():
    assert is_text_type("text/plain")
    assert is_text_type("image/svg+xml")
    assert not is_text_type("video/mp4")


@pytest.mark.parametrize("status,phrase", [
    (HTTPStatus.OK, "OK"),
    (HTTPStatus.PARTIAL_CONTENT, "Partial Content"),
    (HTTPStatus.NOT_FOUND, "Not Found"),
    (HTTPStatus.RANGE_NOT_SATISFIABLE, "Range Not Satisfiable"),
    (HTTPStatus.SERVICE_UNAVAILABLE, "Service Unavailable"),
])
def test_status_phrases(status, phrase):
    assert status.phrase == phrase


def test_status_classes():
    assert HTTPStatus.PARTIAL_CONTENT.is_success
    assert HTTPStatus.NOT_FOUND.is_error
    assert not HTTPStatus.OK.is_error

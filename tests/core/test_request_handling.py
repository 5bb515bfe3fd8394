import logging

import pytest
from django.http import HttpResponse

from core.exceptions import (
    GrantNotFoundError,
    InvalidContinuationError,
    InvalidRequestError,
    capture_exception,
)
from core.middleware import ContinuationTokenMiddleware, HeadersMiddleware
from core.parser import FormOrJsonParser


def test_parse_json(rf):
    request = rf.post("/x", {"a": 1}, content_type="application/json")
    assert FormOrJsonParser().parse_body(request) == {"a": 1}


def test_parse_bad_json(rf):
    with pytest.raises(InvalidRequestError):
        FormOrJsonParser().parse_body(
            rf.post("/x", "{oops", content_type="application/json")
        )
    with pytest.raises(InvalidRequestError):
        FormOrJsonParser().parse_body(
            rf.post("/x", "[1, 2]", content_type="application/json")
        )


def test_parse_form(rf):
    request = rf.post("/x?b=2", {"a": "1"})
    assert FormOrJsonParser().parse_body(request) == {"a": "1", "b": "2"}


@pytest.mark.parametrize(
    "header,token",
    [
        ("GNAP abc", "abc"),
        ("gnap abc", "abc"),
        ("Bearer abc", "abc"),
        ("Basic abc", None),
        ("GNAP ", None),
        (None, None),
    ],
)
def test_continuation_token_middleware(rf, header, token):
    seen = {}

    def view(request):
        seen["token"] = request.continuation_token
        return HttpResponse()

    kwargs = {"HTTP_AUTHORIZATION": header} if header else {}
    ContinuationTokenMiddleware(view)(rf.get("/", **kwargs))
    assert seen["token"] == token


def test_headers_middleware(rf):
    response = HeadersMiddleware(lambda request: HttpResponse())(rf.get("/"))
    assert response.headers["Cache-Control"] == "no-store, max-age=0"

    def cached(request):
        response = HttpResponse()
        response.headers["Cache-Control"] = "max-age=60"
        return response

    assert HeadersMiddleware(cached)(rf.get("/")).headers["Cache-Control"] == (
        "max-age=60"
    )


def test_error_codes():
    assert InvalidContinuationError().to_json() == {"error": "invalid_continuation"}
    assert InvalidContinuationError.status_code == 401
    assert GrantNotFoundError().to_json() == {"error": "invalid_request"}
    assert GrantNotFoundError.status_code == 404


def test_capture_exception_logs(caplog):
    with caplog.at_level(logging.ERROR, logger="core.exceptions"):
        capture_exception(ValueError("boom"))
    assert "boom" in caplog.text

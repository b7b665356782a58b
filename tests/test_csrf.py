import pytest
from werkzeug.test import Client, create_environ
from werkzeug.wrappers import Request, Response

from uptimebot.csrf import (
    COOKIE_NAME,
    HEADER_NAME,
    CsrfMiddleware,
    csrf_field,
    generate_token,
    get_token,
)


def ok_app(environ, start_response):
    request = Request(environ)
    body = request.form.get("echo", "ok")
    return Response(body, status=200)(environ, start_response)


def make_client():
    return Client(CsrfMiddleware(ok_app), use_cookies=False)


def test_generate_token():
    token1 = generate_token()
    token2 = generate_token()
    assert token1 and token2
    assert token1 != token2
    assert len(token1) == 43


def test_get_request_without_cookie_sets_cookie():
    response = make_client().get("/")
    assert response.status_code == 200
    cookies = response.headers.getlist("Set-Cookie")
    assert len(cookies) == 1
    assert cookies[0].startswith(f"{COOKIE_NAME}=")
    assert "HttpOnly" in cookies[0]
    assert "Path=/" in cookies[0]


def test_get_request_with_cookie_does_not_reset():
    response = make_client().get("/", headers={"Cookie": f"{COOKIE_NAME}=abc"})
    assert response.status_code == 200
    assert response.headers.getlist("Set-Cookie") == []


def test_post_without_token_is_forbidden():
    token = generate_token()
    response = make_client().post("/", headers={"Cookie": f"{COOKIE_NAME}={token}"})
    assert response.status_code == 403
    assert b"CSRF validation failed" in response.data


def test_post_without_cookie_is_forbidden():
    response = make_client().post("/", headers={HEADER_NAME: "abc"})
    assert response.status_code == 403


def test_post_with_valid_header_token():
    token = generate_token()
    response = make_client().post(
        "/", headers={"Cookie": f"{COOKIE_NAME}={token}", HEADER_NAME: token}
    )
    assert response.status_code == 200


def test_post_with_mismatched_header_token():
    response = make_client().post(
        "/", headers={"Cookie": f"{COOKIE_NAME}=one", HEADER_NAME: "two"}
    )
    assert response.status_code == 403


def test_post_with_valid_form_token_keeps_body():
    token = generate_token()
    response = make_client().post(
        "/",
        data={"csrf_token": token, "echo": "hello"},
        headers={"Cookie": f"{COOKIE_NAME}={token}"},
    )
    assert response.status_code == 200
    assert response.data == b"hello"


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"Cookie": f"{COOKIE_NAME}=test-token"}, "test-token"),
        ({}, ""),
    ],
)
def test_get_token(headers, expected):
    request = Request(create_environ("/", headers=headers))
    assert get_token(request) == expected


def test_csrf_field():
    request = Request(create_environ("/", headers={"Cookie": f"{COOKIE_NAME}=test-token"}))
    assert (
        csrf_field(request)
        == '<input type="hidden" name="csrf_token" value="test-token">'
    )


def test_csrf_field_without_cookie():
    assert csrf_field(Request(create_environ("/"))) == ""
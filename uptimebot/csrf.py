"""Double-submit cookie CSRF protection as WSGI middleware."""

from __future__ import annotations

import base64
import io
import secrets
from typing import Any, Callable, Iterable

from werkzeug.http import dump_cookie
from werkzeug.wrappers import Request, Response

TOKEN_LENGTH = 32
COOKIE_NAME = "csrf_token"
HEADER_NAME = "X-CSRF-Token"
FORM_FIELD_NAME = "csrf_token"

_SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def generate_token() -> str:
    """Return a fresh random token, unpadded standard base64."""
    raw = secrets.token_bytes(TOKEN_LENGTH)
    return base64.b64encode(raw).rstrip(b"=").decode("ascii")


def get_token(request: Request) -> str:
    """The token stored in the request's cookie, or an empty string."""
    return request.cookies.get(COOKIE_NAME, "")


def csrf_field(request: Request) -> str:
    """A hidden form input carrying the request's token, or '' without one."""
    token = get_token(request)
    if not token:
        return ""
    return f'<input type="hidden" name="{FORM_FIELD_NAME}" value="{token}">'


class CsrfMiddleware:
    """Issues a token cookie on safe requests and checks it on all others."""

    def __init__(self, app: Callable[..., Iterable[bytes]]) -> None:
        self.app = app

    def __call__(
        self, environ: dict[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        request = Request(environ)

        if request.method in _SAFE_METHODS:
            if COOKIE_NAME in request.cookies:
                return self.app(environ, start_response)
            cookie = dump_cookie(
                COOKIE_NAME, generate_token(), path="/", httponly=True, secure=False
            )

            def start_with_cookie(status, headers, exc_info=None):
                headers = list(headers)
                headers.append(("Set-Cookie", cookie))
                return start_response(status, headers, exc_info)

            return self.app(environ, start_with_cookie)

        if not self._is_valid(request, environ):
            response = Response(
                "Forbidden: CSRF validation failed\n",
                status=403,
                mimetype="text/plain",
            )
            return response(environ, start_response)

        return self.app(environ, start_response)

    @staticmethod
    def _is_valid(request: Request, environ: dict[str, Any]) -> bool:
        expected = request.cookies.get(COOKIE_NAME)
        if expected is None:
            return False

        token = request.headers.get(HEADER_NAME, "")
        if not token:
            body = request.get_data(cache=True, parse_form_data=False)
            # Leave the body readable for the wrapped application.
            environ["wsgi.input"] = io.BytesIO(body)
            environ["CONTENT_LENGTH"] = str(len(body))
            token = request.form.get(FORM_FIELD_NAME) or request.args.get(
                FORM_FIELD_NAME, ""
            )

        return bool(token) and token == expected
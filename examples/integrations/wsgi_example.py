"""
WSGI integration example for bodydecode.

This example shows a WSGI middleware that decodes the request body into a
target object before calling the wrapped application.

Run with:
    python examples/integrations/wsgi_example.py
"""

from __future__ import annotations

import json
from dataclasses import dataclass

import bodydecode
from bodydecode import BodyDecodeError, Request, field


@dataclass
class Signup:
    email: str = field("", form="email", json="email", xml="email", required=True)
    name: str = ""
    newsletter: bool = False


class BodyDecodeMiddleware:
    """
    WSGI middleware decoding request bodies into ``environ["bodydecode.target"]``.

    Requests with a body that cannot be decoded get a 400 (or 415) response
    and never reach the wrapped application.
    """

    def __init__(self, app, target_factory, decoders=None):
        """
        Initialize middleware.

        Args:
            app: The WSGI application to wrap
            target_factory: Callable returning a fresh target per request
            decoders: Registry to use, defaults to a new one
        """
        self.app = app
        self.target_factory = target_factory
        self.decoders = decoders or bodydecode.new()

    def __call__(self, environ, start_response):
        if environ.get("REQUEST_METHOD", "GET") not in ("POST", "PUT", "PATCH"):
            return self.app(environ, start_response)

        request = Request.from_environ(environ)
        target = self.target_factory()
        try:
            self.decoders.decode(request, target)
        except bodydecode.UnsupportedContentTypeError as e:
            return self._error_response(start_response, "415 Unsupported Media Type", e)
        except BodyDecodeError as e:
            return self._error_response(start_response, "400 Bad Request", e)

        # Let the application read replayed bodies
        environ["wsgi.input"] = request.body
        environ["bodydecode.target"] = target
        environ["bodydecode.files"] = request.files
        return self.app(environ, start_response)

    def _error_response(self, start_response, status, error):
        body = json.dumps({"error": error.message, "code": error.code}).encode()
        start_response(
            status,
            [("Content-Type", "application/json"), ("Content-Length", str(len(body)))],
        )
        return [body]


def simple_wsgi_app(environ, start_response):
    """Simple WSGI application echoing the decoded signup."""
    signup = environ.get("bodydecode.target")
    if signup is None:
        payload = {"message": "POST a signup as JSON, XML or a form"}
    else:
        payload = {
            "email": signup.email,
            "name": signup.name,
            "newsletter": signup.newsletter,
        }
    body = json.dumps(payload).encode()
    start_response("200 OK", [("Content-Type", "application/json")])
    return [body]


application = BodyDecodeMiddleware(simple_wsgi_app, Signup)


if __name__ == "__main__":
    from wsgiref.simple_server import make_server

    with make_server("", 8000, application) as server:
        print("Serving on http://localhost:8000")
        server.serve_forever()

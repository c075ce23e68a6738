"""One-shot local HTTP listener for the OAuth redirect.

Modeled on the redirect server google_auth_oauthlib runs inside
``InstalledAppFlow.run_local_server``, but bound to a fixed port and
answering the browser with an explicit success or failure page.

Usage::

    with CallbackListener(port=3000) as listener:
        code = listener.wait_for_code()
"""
from __future__ import annotations

import logging
import wsgiref.simple_server
from typing import Any, Callable, Iterable, List, Optional, Tuple
from urllib.parse import parse_qs

from core.constants import REDIRECT_HOST, REDIRECT_PORT

from .errors import AuthFlowError

LOG = logging.getLogger(__name__)

SUCCESS_PAGE = b"<h1>Authentication successful!</h1><p>You can close this window.</p>"
FAILURE_PAGE = b"<h1>Authentication failed</h1><p>No code received.</p>"
NOT_FOUND_PAGE = b"Not found"


class _QuietHandler(wsgiref.simple_server.WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        # Keep the access log out of the terminal; the query string carries the code
        LOG.debug("callback request: %s", self.path.split("?", 1)[0])


class CallbackListener:
    """Bind, wait for the redirect carrying ``code``, respond, unbind.

    Only requests for ``/`` settle the wait; anything else (favicon probes)
    gets a 404 and the listener keeps waiting. ``timeout`` is None by default,
    meaning the wait lasts until a redirect arrives or the process is
    interrupted.
    """

    def __init__(
        self,
        host: str = REDIRECT_HOST,
        port: int = REDIRECT_PORT,
        timeout: Optional[float] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.code: Optional[str] = None
        self.error: Optional[str] = None
        self._server: Optional[wsgiref.simple_server.WSGIServer] = None

    def __enter__(self) -> "CallbackListener":
        try:
            self._server = wsgiref.simple_server.make_server(
                self.host, self.port, self._app, handler_class=_QuietHandler
            )
        except OSError as exc:
            raise AuthFlowError(f"Could not listen on {self.host}:{self.port}: {exc}") from exc
        self._server.timeout = self.timeout
        self.port = self._server.server_port
        LOG.debug("OAuth callback listener bound on %s:%s", self.host, self.port)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._server is not None:
            self._server.server_close()
            self._server = None
            LOG.debug("OAuth callback listener closed")

    @property
    def redirect_uri(self) -> str:
        return f"http://{self.host}:{self.port}"

    def wait_for_code(self) -> str:
        """Block until the redirect lands and return the authorization code."""
        if self._server is None:
            raise RuntimeError("CallbackListener is not open; use it as a context manager")
        settled = False
        while not settled:
            handled = self._handle_one()
            if not handled:
                raise AuthFlowError(f"Timed out after {self.timeout}s waiting for authorization")
            settled = self.code is not None or self.error is not None
        if self.code is None:
            raise AuthFlowError(f"Authorization failed: {self.error}")
        return self.code

    def _handle_one(self) -> bool:
        """Serve a single request; False when the timeout elapsed first."""
        timed_out: List[bool] = []
        server = self._server
        original = server.handle_timeout
        server.handle_timeout = lambda: timed_out.append(True)  # type: ignore[method-assign]
        try:
            server.handle_request()
        finally:
            server.handle_timeout = original  # type: ignore[method-assign]
        return not timed_out

    def _app(
        self,
        environ: dict,
        start_response: Callable[[str, List[Tuple[str, str]]], Any],
    ) -> Iterable[bytes]:
        if environ.get("PATH_INFO", "/") != "/":
            start_response("404 Not Found", [("Content-Type", "text/plain")])
            return [NOT_FOUND_PAGE]

        params = parse_qs(environ.get("QUERY_STRING", ""))
        code = (params.get("code") or [None])[0]
        if code:
            self.code = code
            start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
            return [SUCCESS_PAGE]

        self.error = (params.get("error") or ["No code received"])[0]
        start_response("400 Bad Request", [("Content-Type", "text/html; charset=utf-8")])
        return [FAILURE_PAGE]

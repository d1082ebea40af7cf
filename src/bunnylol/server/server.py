"""Bunnylol redirect HTTP server.

Built on the standard library ``http.server`` module.  Point a browser's
search shortcut at ``http://localhost:8085/?cmd=%s`` and every query is
redirected to the URL its command resolves to.

Routes:
    GET /?cmd=<text>  302 redirect to the resolved URL
    GET /health       plain-text ``ok``
    GET /             HTML landing page listing every command
    anything else     the landing page with status 404

Example
-------
>>> from bunnylol.server.server import BunnylolServer
>>> server = BunnylolServer(app=app, host="127.0.0.1", port=8085)
>>> server.start()           # blocks
>>> # Or run in background:
>>> server.start_background()
>>> server.stop()
"""
from __future__ import annotations

import html
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import TYPE_CHECKING
from urllib.parse import parse_qs, urlsplit

from bunnylol.plugins.descriptor import CommandInfo

if TYPE_CHECKING:
    from bunnylol.convenience import Bunnylol
    from bunnylol.history.logger import History

logger = logging.getLogger(__name__)

_LANDING_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>bunnylol</title>
<style>
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
body {{ font-family: -apple-system, BlinkMacSystemFont, 'Helvetica Neue', sans-serif;
        color: #333; max-width: 900px; margin: 0 auto; padding: 48px 24px; }}
header {{ text-align: center; margin-bottom: 48px; }}
header h1 {{ font-size: 1.4em; font-weight: 600; margin-bottom: 4px; }}
header p {{ color: #999; font-size: .8em; font-family: 'SF Mono', Menlo, Consolas, monospace; }}
table {{ width: 100%; border-collapse: collapse; font-size: .88em; }}
th {{ text-align: left; padding: 6px 12px; border-bottom: 2px solid #e0e0e0; font-weight: 600;
      color: #666; font-size: .75em; text-transform: uppercase; letter-spacing: .05em; }}
td {{ padding: 7px 12px; border-bottom: 1px solid #f0f0f0; vertical-align: top; }}
tr:hover {{ background: #fafafa; }}
.cmd {{ font-family: 'SF Mono', Menlo, Consolas, monospace; font-weight: 600; white-space: nowrap; }}
.example {{ font-family: 'SF Mono', Menlo, Consolas, monospace; color: #999; font-size: .9em; }}
</style>
</head>
<body>
<header>
<h1>bunnylol</h1>
<p>{display_url}</p>
</header>
<table>
<thead><tr><th>Command</th><th>Description</th><th>Example</th></tr></thead>
<tbody>
{rows}</tbody>
</table>
</body>
</html>
"""


def sort_commands(commands: list[CommandInfo]) -> list[CommandInfo]:
    """Sort commands case-insensitively by primary binding."""
    return sorted(commands, key=lambda info: info.primary.lower())


def render_landing_page(commands: list[CommandInfo], display_url: str) -> str:
    """Render the HTML command listing."""
    rows = "".join(
        '<tr><td class="cmd">{}</td><td>{}</td><td class="example">{}</td></tr>\n'.format(
            html.escape(info.primary),
            html.escape(info.description),
            html.escape(info.example),
        )
        for info in sort_commands(commands)
    )
    return _LANDING_HTML.format(display_url=html.escape(display_url), rows=rows)


class _RedirectHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the redirect server."""

    # Set per instance by BunnylolServer._build_server.
    app: "Bunnylol"
    history: "History | None"
    display_url: str

    def do_GET(self) -> None:  # noqa: N802
        """Handle GET requests."""
        parts = urlsplit(self.path)
        query = parse_qs(parts.query, keep_blank_values=True)

        if parts.path == "/health":
            self._send_text("ok")
        elif parts.path in ("/", "/index.html") and "cmd" in query:
            self._redirect(query["cmd"][0])
        elif parts.path in ("/", "/index.html"):
            self._send_html(self._landing(), status=200)
        else:
            self._send_html(self._landing(), status=404)

    def _redirect(self, command: str) -> None:
        url = self.app.resolve(command)
        if self.history is not None and command.strip():
            try:
                self.history.add(command, user=self.client_address[0])
            except OSError as exc:
                logger.warning("Failed to save history: %s", exc)
        self.send_response(302)
        self.send_header("Location", url)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def _landing(self) -> str:
        return render_landing_page(self.app.list_commands(), self.display_url)

    def _send_html(self, page: str, status: int) -> None:
        body = page.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_text(self, text: str) -> None:
        body = text.encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, fmt: str, *args: object) -> None:  # type: ignore[override]
        """Route request logging through the module logger."""
        logger.debug(fmt, *args)


class BunnylolServer:
    """Wraps a ``ThreadingHTTPServer`` serving command redirects.

    Parameters
    ----------
    app:
        The :class:`~bunnylol.convenience.Bunnylol` instance that resolves
        commands.
    host:
        Bind address (default: ``"127.0.0.1"``).
    port:
        Port to listen on (default: ``8085``).
    history:
        Optional history recorder; each redirect is logged with the
        client address as the user.
    display_url:
        Public URL shown on the landing page.  Defaults to :attr:`url`.
    """

    def __init__(
        self,
        app: "Bunnylol",
        host: str = "127.0.0.1",
        port: int = 8085,
        history: "History | None" = None,
        display_url: str | None = None,
    ) -> None:
        self._app = app
        self._host = host
        self._port = port
        self._history = history
        self._display_url = display_url
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the server and block until stopped (Ctrl-C)."""
        self._server = self._build_server()
        logger.info("Bunnylol listening on %s", self.url)
        try:
            self._server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down")
        finally:
            self._server.server_close()
            self._server = None

    def start_background(self) -> None:
        """Start the server in a daemon background thread."""
        self._server = self._build_server()
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            daemon=True,
            name="bunnylol-server",
        )
        self._thread.start()
        logger.info("Bunnylol listening (background) on %s", self.url)

    def stop(self) -> None:
        """Stop the background server."""
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    @property
    def url(self) -> str:
        """The base URL the server listens on."""
        return f"http://{self._host}:{self.port}/"

    @property
    def port(self) -> int:
        """The bound port (resolved after start when ``port=0``)."""
        if self._server is not None:
            return int(self._server.server_address[1])
        return self._port

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_server(self) -> ThreadingHTTPServer:
        """Create and configure the HTTP server."""
        # A handler subclass per server instance avoids sharing state.
        class _Handler(_RedirectHandler):
            pass

        _Handler.app = self._app
        _Handler.history = self._history
        _Handler.display_url = self._display_url or f"http://{self._host}:{self._port}"

        server = ThreadingHTTPServer((self._host, self._port), _Handler)
        server.daemon_threads = True
        return server

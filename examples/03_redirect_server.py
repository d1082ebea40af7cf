#!/usr/bin/env python3
"""Example: Redirect server — bunnylol

Starts the redirect server in the background, issues one redirect
request, and prints the Location header.

Usage:
    python examples/03_redirect_server.py
"""
from __future__ import annotations

import urllib.error
import urllib.request
from pathlib import Path

import bunnylol

_PLUGINS = Path(__file__).parent / "plugins"


class _NoRedirect(urllib.request.HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, headers, newurl):  # type: ignore[no-untyped-def]
        return None


def main() -> None:
    app = bunnylol.Bunnylol(path_resolver=bunnylol.PathResolver(vendor_dirs=[_PLUGINS]))
    server = bunnylol.BunnylolServer(app=app, port=0)
    server.start_background()
    try:
        opener = urllib.request.build_opener(_NoRedirect)
        try:
            opener.open(f"{server.url}?cmd=gh%20facebook/react")
        except urllib.error.HTTPError as exc:
            print(f"{exc.code} -> {exc.headers['Location']}")
    finally:
        server.stop()


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Build the blog, rebuild it on post changes and serve the output directory."""

from __future__ import annotations

import argparse
import functools
import http.server
import os
import re
import socketserver
import sys
from pathlib import Path
from typing import Optional, Sequence

from blogsite.generate import add_path_arguments, build_blog, config_from_args
from blogsite.watcher import start_watcher

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
INDEX_FILE = "index.html"
NOT_FOUND_BODY = "404 Not Found"


def normalize_path(raw_path: str) -> str:
    """Merge repeated slashes and trim the trailing one, keeping any query string."""
    route, sep, query = raw_path.partition("?")
    route = re.sub(r"/{2,}", "/", route)
    if not route.startswith("/"):
        route = "/" + route
    if len(route) > 1:
        route = route.rstrip("/")
    return route + sep + query


class BlogRequestHandler(http.server.SimpleHTTPRequestHandler):
    def do_GET(self):
        if self._resolve_request():
            return http.server.SimpleHTTPRequestHandler.do_GET(self)

    def do_HEAD(self):
        if self._resolve_request():
            return http.server.SimpleHTTPRequestHandler.do_HEAD(self)

    def _resolve_request(self) -> bool:
        self.path = normalize_path(self.path)
        target = Path(self.translate_path(self.path))

        # Directories are served through their index file instead of a redirect.
        if target.is_dir():
            target = target / INDEX_FILE
            route, sep, query = self.path.partition("?")
            self.path = f"{route.rstrip('/')}/{INDEX_FILE}{sep}{query}"

        if target.is_file():
            return True
        self._send_not_found()
        return False

    def _send_not_found(self) -> None:
        body = NOT_FOUND_BODY.encode("utf-8")
        self.send_response(404)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)


class BlogServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True


def make_server(directory: Path, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> BlogServer:
    handler = functools.partial(BlogRequestHandler, directory=str(directory))
    return BlogServer((host, port), handler)


def default_port() -> int:
    raw = os.environ.get("PORT")
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got {raw!r}") from None


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    add_path_arguments(parser)
    parser.add_argument("--host", default=DEFAULT_HOST, help="Interface to bind")
    parser.add_argument("--port", type=int, default=None, help=f"Port to bind (default: $PORT or {DEFAULT_PORT})")
    parser.add_argument("--no-watch", action="store_true", help="Do not rebuild when posts change")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    config = config_from_args(args)

    try:
        port = args.port if args.port is not None else default_port()
    except ValueError as exc:
        parser.error(str(exc))

    print("Building blog...")
    try:
        build_blog(config)
    except OSError as exc:
        print(f"Failed to build blog: {exc}", file=sys.stderr)
        return 1
    print("Blog built successfully")

    if not args.no_watch:
        try:
            start_watcher(
                config.posts_dir,
                lambda: build_blog(config),
                on_event=print,
                on_error=lambda exc: print(f"Error rebuilding blog: {exc}", file=sys.stderr),
            )
        except (ImportError, OSError) as exc:
            print(f"Failed to set up file watcher: {exc}", file=sys.stderr)

    try:
        httpd = make_server(config.output_dir, args.host, port)
    except OSError as exc:
        print(f"Failed to bind {args.host}:{port}: {exc}", file=sys.stderr)
        return 1

    print(f"Serving at http://{args.host}:{port}")
    sys.stdout.flush()

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        httpd.server_close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

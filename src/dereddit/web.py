#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-09 10:41:18 krylon>
#
# /data/code/python/dereddit/src/dereddit/web.py
# created on 03. 12. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.web

(c) 2025 Benjamin Walkenhorst
"""


import logging
import pathlib
from threading import Lock
from typing import Final, Optional, Union
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

import bottle
from bottle import HTTPResponse, response, static_file

from dereddit import common

mime_types: Final[dict[str, str]] = {
    ".xml": "application/rss+xml; charset=utf-8",
    ".rss": "application/rss+xml; charset=utf-8",
}


class WebError(common.DeredditError):
    """WebError indicates a problem with the web server."""


class _Handler(WSGIRequestHandler):
    """Send the request log to our logger instead of stderr."""

    log: logging.Logger = common.get_logger("web.access")

    def log_message(self, format: str, *args) -> None:  # pylint: disable-msg=W0622
        self.log.debug("%s - %s", self.address_string(), format % args)


class FeedServer:
    """FeedServer makes the generated feeds available via HTTP."""

    __slots__ = [
        "log",
        "lock",
        "root",
        "host",
        "port",
        "app",
        "server",
    ]

    log: logging.Logger
    lock: Lock
    root: pathlib.Path
    host: str
    port: int
    app: bottle.Bottle
    server: Optional[WSGIServer]

    def __init__(self,
                 root: Union[str, pathlib.Path],
                 host: str = "",
                 port: int = 8080) -> None:
        self.log = common.get_logger("web")
        self.lock = Lock()
        self.root = pathlib.Path(root)
        self.host = host
        self.port = port
        self.server = None

        bottle.debug(common.Debug)
        self.app = bottle.Bottle()
        self.app.route("/", callback=self._handle_index)
        self.app.route("/<path:path>", callback=self._handle_file)

    def bind(self) -> None:
        """Create the server socket. This is where we fail if the address is taken."""
        with self.lock:
            try:
                self.server = make_server(self.host,
                                          self.port,
                                          self.app,
                                          handler_class=_Handler)
            except OSError as err:
                raise WebError(
                    f"Cannot listen on {self.host}:{self.port}: {err}") from err
            self.port = self.server.server_port
        self.log.info("Serving feeds from %s on %s:%d",
                      self.root,
                      self.host or "*",
                      self.port)

    def serve(self) -> None:
        """Run the web server until stop() is called."""
        if self.server is None:
            self.bind()
        srv: Optional[WSGIServer] = self.server
        if srv is None:
            raise WebError("Server was stopped before it could start")
        srv.serve_forever()

    def stop(self) -> None:
        """Shut down the web server."""
        with self.lock:
            if self.server is None:
                return
            self.server.shutdown()
            self.server.server_close()
            self.server = None

    def _handle_index(self) -> str:
        """List the feeds we have."""
        response.content_type = "text/plain; charset=utf-8"
        feeds = sorted(p.name for p in self.root.glob("*.xml"))
        return "".join(f"{f}\n" for f in feeds)

    def _handle_file(self, path: str) -> HTTPResponse:
        """Deliver a file from the feed directory."""
        suffix: Final[str] = pathlib.PurePosixPath(path).suffix
        if suffix in mime_types:
            res = static_file(path, root=str(self.root), mimetype=mime_types[suffix])
        else:
            res = static_file(path, root=str(self.root))
        if res.status_code >= 400:
            self.log.info("Cannot deliver %s: %s", path, res.status_line)
        return res

# Local Variables: #
# python-indent: 4 #
# End: #

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-06 14:02:11 krylon>
#
# /data/code/python/dereddit/src/dereddit/common.py
# created on 29. 11. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.common

(c) 2025 Benjamin Walkenhorst

Constants, paths and logging shared by the rest of the application.
"""


import logging
import pathlib
import sys
import tempfile
from threading import Lock
from typing import Final, Union

AppName: Final[str] = "dereddit"
AppVersion: Final[str] = "0.9.1"
Debug: bool = False
TimeFmt: Final[str] = "%Y-%m-%d %H:%M:%S"
LogFmt: Final[str] = "%(asctime)s (%(name)-24s) [%(levelname)-8s] %(message)s"


class DeredditError(Exception):
    """Base class for application-specific exceptions."""


class Path:
    """Path provides the filesystem locations the application uses by default."""

    __slots__ = ["__base"]

    def __init__(self, root: Union[str, pathlib.Path]) -> None:
        self.__base = pathlib.Path(root)

    def base(self, path: Union[str, pathlib.Path, None] = None) -> pathlib.Path:
        """Return the base directory. If path is given, set the base directory first."""
        if path is not None:
            self.__base = pathlib.Path(path)
        return self.__base

    @property
    def feeds(self) -> pathlib.Path:
        """Return the default directory the generated feeds are written to."""
        return self.__base.joinpath(AppName)

    @property
    def cache(self) -> pathlib.Path:
        """Return the default directory of the enrichment cache."""
        return self.__base.joinpath(f"{AppName}.cache")


path: Path = Path(tempfile.gettempdir())

_lock: Final[Lock] = Lock()
_handlers: list[logging.Handler] = []


def set_basedir(folder: Union[str, pathlib.Path]) -> None:
    """Set the base directory the default paths are derived from."""
    with _lock:
        path.base(folder)
        path.base().mkdir(parents=True, exist_ok=True)


def set_debug(flag: bool) -> None:
    """Switch debug logging on or off for all loggers handed out so far."""
    global Debug  # pylint: disable-msg=W0603
    with _lock:
        Debug = flag
        level: Final[int] = logging.DEBUG if flag else logging.INFO
        logging.getLogger(AppName).setLevel(level)
        for h in _handlers:
            h.setLevel(level)


def _init_logging() -> logging.Logger:
    """Attach a console handler to the application's root logger, once."""
    root: Final[logging.Logger] = logging.getLogger(AppName)
    if not _handlers:
        level: int = logging.DEBUG if Debug else logging.INFO
        fmt = logging.Formatter(LogFmt)
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(fmt)
        console.setLevel(level)
        root.addHandler(console)
        root.setLevel(level)
        root.propagate = False
        _handlers.append(console)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a named child of the application logger."""
    with _lock:
        _init_logging()
        return logging.getLogger(f"{AppName}.{name}")


# Local Variables: #
# python-indent: 4 #
# End: #

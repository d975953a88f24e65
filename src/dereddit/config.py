#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-06 15:40:27 krylon>
#
# /data/code/python/dereddit/src/dereddit/config.py
# created on 29. 11. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.config

(c) 2025 Benjamin Walkenhorst
"""


import argparse
import pathlib
import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Final

from dereddit import common

readability_url: Final[str] = "http://www.readability.com/api/content/v1"
feed_url: Final[str] = "https://www.reddit.com/r/{name}/.rss"
name_pat: Final[re.Pattern] = re.compile(r"[A-Za-z0-9_]+")


class ConfigError(common.DeredditError):
    """ConfigError indicates an invalid setting."""


def split_list(text: str) -> tuple[str, ...]:
    """Split a comma-separated list, dropping empty items."""
    return tuple(x.strip() for x in text.split(",") if x.strip() != "")


def parse_address(addr: str) -> tuple[str, int]:
    """Split a listen address of the form [host]:port into host and port."""
    host, sep, port = addr.rpartition(":")
    if sep == "":
        raise ConfigError(f"Listen address {addr!r} lacks a port")
    try:
        num: int = int(port)
    except ValueError as err:
        raise ConfigError(f"Invalid port in listen address {addr!r}") from err
    if not 0 <= num <= 65535:
        raise ConfigError(f"Port {num} is out of range")
    return host.strip("[]"), num


@dataclass(kw_only=True, slots=True, frozen=True)
class Config:
    """Config holds the settings shared by all parts of the application.

    It is built once at startup and never modified afterwards.
    """

    token: str
    sources: tuple[str, ...]
    interval: timedelta = timedelta(minutes=30)
    listen: str = ":8080"
    blacklist: frozenset[str] = frozenset()
    allow_self_posts: bool = False
    purge_after: timedelta = timedelta(days=7)
    output_dir: pathlib.Path = field(default_factory=lambda: common.path.feeds)
    cache_dir: pathlib.Path = field(default_factory=lambda: common.path.cache)
    confidence: float = 0.5
    verbose: bool = False
    readability_url: str = readability_url
    feed_url: str = feed_url

    def __post_init__(self) -> None:
        if self.token == "":
            raise ConfigError("api key not specified")
        if len(self.sources) == 0:
            raise ConfigError("No subreddits to watch were given")
        for name in self.sources:
            if name_pat.fullmatch(name) is None:
                raise ConfigError(f"Invalid subreddit name {name!r}")
        if self.interval <= timedelta(0):
            raise ConfigError(f"Update interval must be positive, not {self.interval}")
        if self.purge_after <= timedelta(0):
            raise ConfigError(f"Purge time must be positive, not {self.purge_after}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ConfigError(f"Confidence must be between 0 and 1, not {self.confidence}")
        if self.listen != "":
            parse_address(self.listen)

    @property
    def address(self) -> tuple[str, int]:
        """Return the host and port the web server should listen on."""
        return parse_address(self.listen)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'Config':
        """Create a Config from parsed command line arguments."""
        return cls(
            token=args.api_key,
            sources=split_list(args.subreddits),
            interval=timedelta(minutes=args.update),
            listen="" if args.no_listen else args.listen,
            blacklist=frozenset(split_list(args.users)),
            allow_self_posts=args.self_posts,
            purge_after=timedelta(days=args.purge),
            output_dir=pathlib.Path(args.dir),
            cache_dir=pathlib.Path(args.cache),
            confidence=args.confidence,
            verbose=args.verbose,
        )

    def ensure_dirs(self) -> None:
        """Create the output and cache directories if they do not exist."""
        for d in (self.output_dir, self.cache_dir):
            d.mkdir(parents=True, exist_ok=True)

# Local Variables: #
# python-indent: 4 #
# End: #

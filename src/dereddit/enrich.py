#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-07 14:47:09 krylon>
#
# /data/code/python/dereddit/src/dereddit/enrich.py
# created on 30. 11. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.enrich

(c) 2025 Benjamin Walkenhorst
"""


import html
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Final, Optional, Protocol

from dereddit import common
from dereddit.cache import Cache, CacheError, key_for
from dereddit.client import FetchError
from dereddit.model import EnrichmentError, EnrichmentResult, utcnow


class ContentService(Protocol):  # pylint: disable-msg=R0903
    """ContentService is what the Enricher needs from the content service."""

    def parse(self, link: str) -> dict[str, Any]:
        """Return the article behind the link as decoded JSON."""


@dataclass(slots=True)
class _KeyLock:
    lock: Lock = field(default_factory=Lock)
    users: int = 0


class Enricher:
    """Enricher turns links into articles, asking the content service only on a cache miss."""

    __slots__ = [
        "log",
        "cache",
        "service",
        "lock",
        "locks",
    ]

    log: logging.Logger
    cache: Cache
    service: ContentService
    lock: Lock
    locks: dict[str, _KeyLock]

    def __init__(self, cache: Cache, service: ContentService) -> None:
        self.log = common.get_logger("enricher")
        self.cache = cache
        self.service = service
        self.lock = Lock()
        self.locks = {}

    @contextmanager
    def _hold(self, key: str) -> Iterator[None]:
        """Hold the lock for one key. Locks exist only while someone uses them."""
        with self.lock:
            kl = self.locks.get(key)
            if kl is None:
                kl = self.locks[key] = _KeyLock()
            kl.users += 1
        try:
            with kl.lock:
                yield
        finally:
            with self.lock:
                kl.users -= 1
                if kl.users == 0:
                    del self.locks[key]

    def resolve(self, link: str) -> EnrichmentResult:
        """Return the article behind the link.

        A cached article is returned no matter how old it is; removing stale
        articles is the job of the cache sweep. On a cache miss, the content
        service is asked, and the result is stored in the cache.
        Calls for the same link are serialized, so the content service is asked
        at most once per link.

        Raises EnrichmentError if the content service fails or sends garbage.
        The cache is not touched in that case.
        """
        key: Final[str] = key_for(link)
        with self._hold(key):
            res: Optional[EnrichmentResult] = self._lookup(key, link)
            if res is not None:
                return res

            try:
                data = self.service.parse(link)
            except FetchError as err:
                raise EnrichmentError(f"Cannot fetch {link}: {err}") from err

            res = EnrichmentResult.from_response(data, captured=utcnow())

            try:
                self.cache.write(key, res)
            except CacheError as err:
                self.log.error("Cannot cache article %s: %s", link, err)

            return res

    def _lookup(self, key: str, link: str) -> Optional[EnrichmentResult]:
        try:
            res = self.cache.read(key)
        except CacheError as err:
            self.log.error("Cannot load cached article %s: %s", link, err)
            return None

        if res is not None:
            self.log.debug("Cache hit: %s", link)
        return res

    @staticmethod
    def image(link: str) -> EnrichmentResult:
        """Return an article that consists of nothing but the image the link points to."""
        return EnrichmentResult(
            title="Image",
            content=f"<img src=\"{html.escape(link)}\" alt=\"Image\" />",
        )

# Local Variables: #
# python-indent: 4 #
# End: #

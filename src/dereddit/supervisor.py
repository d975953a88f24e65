#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-09 16:27:03 krylon>
#
# /data/code/python/dereddit/src/dereddit/supervisor.py
# created on 03. 12. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.supervisor

(c) 2025 Benjamin Walkenhorst

The Supervisor runs the show: it owns the workers, the cache sweep, and the
web server, and it translates signals into actions:

- SIGUSR1 updates all feeds right away
- SIGUSR2 toggles automatic updates
- SIGHUP purges stale articles from the cache
"""


import logging
import signal
from datetime import datetime, timedelta
from threading import Event, Lock, Thread
from typing import Final, Optional

from dereddit import common
from dereddit.cache import Cache, CacheError
from dereddit.client import FeedClient, ReadabilityClient
from dereddit.config import Config
from dereddit.enrich import Enricher
from dereddit.feed import FeedBuilder
from dereddit.model import EnrichmentResult, Source, utcnow
from dereddit.policy import FilterPolicy
from dereddit.web import FeedServer
from dereddit.worker import FeedSource, SourceWorker, UpdateFlag

sweep_interval: Final[timedelta] = timedelta(hours=12)
join_timeout: Final[float] = 5.0


class Supervisor:
    """Supervisor owns and drives all the moving parts of the application."""

    __slots__ = [
        "log",
        "lock",
        "cfg",
        "cache",
        "flag",
        "workers",
        "server",
        "sweep_interval",
        "_active",
        "_purge",
        "_shutdown",
        "_threads",
    ]

    log: logging.Logger
    lock: Lock
    cfg: Config
    cache: Cache
    flag: UpdateFlag
    workers: dict[str, SourceWorker]
    server: Optional[FeedServer]
    sweep_interval: timedelta
    _active: bool
    _purge: Event
    _shutdown: Event
    _threads: list[Thread]

    def __init__(self,
                 cfg: Config,
                 *,
                 cache: Optional[Cache] = None,
                 feeds: Optional[FeedSource] = None,
                 service: Optional[ReadabilityClient] = None) -> None:
        self.log = common.get_logger("supervisor")
        self.lock = Lock()
        self.cfg = cfg
        self.cache = cache if cache is not None else Cache(cfg.cache_dir)
        self.flag = UpdateFlag()
        self.sweep_interval = sweep_interval
        self._active = False
        self._purge = Event()
        self._shutdown = Event()
        self._threads = []

        if feeds is None:
            feeds = FeedClient()
        if service is None:
            service = ReadabilityClient(cfg.token, cfg.readability_url)

        enricher: Final[Enricher] = Enricher(self.cache, service)
        policy: Final[FilterPolicy] = FilterPolicy(cfg, service.confidence)
        builder: Final[FeedBuilder] = FeedBuilder()

        self.workers = {}
        for name in cfg.sources:
            src = Source(name=name, interval=cfg.interval, url_template=cfg.feed_url)
            self.workers[name] = SourceWorker(src,
                                              feeds=feeds,
                                              enricher=enricher,
                                              policy=policy,
                                              builder=builder,
                                              outdir=cfg.output_dir,
                                              flag=self.flag)

        self.server = None
        if cfg.listen != "":
            host, port = cfg.address
            self.server = FeedServer(cfg.output_dir, host, port)

    @property
    def active(self) -> bool:
        """Return the Supervisor's active flag."""
        with self.lock:
            return self._active

    @active.setter
    def active(self, value: bool) -> None:
        with self.lock:
            self._active = value

    def refresh_all(self) -> None:
        """Tell every worker to update its feed."""
        self.log.info("Update of all feeds triggered.")
        for w in self.workers.values():
            w.trigger()

    def toggle_updates(self) -> bool:
        """Switch automatic updates on or off. Return the new state."""
        state: Final[bool] = self.flag.toggle()
        self.log.info("automatic updates: %s", "on" if state else "off")
        return state

    def purge(self) -> None:
        """Tell the sweep thread to clean the cache."""
        self._purge.set()

    def sweep(self, now: Optional[datetime] = None) -> int:
        """Remove articles older than the purge time from the cache.

        Return the number of articles removed.
        """
        self.log.info("Cache clean triggered.")
        if now is None:
            now = utcnow()
        cnt: int = 0
        for key in self.cache.keys():
            try:
                item: Optional[EnrichmentResult] = self.cache.read(key)
            except CacheError as err:
                self.log.error("Cannot load cached article %s, removing it: %s", key, err)
                item = None
            else:
                if item is None or item.age(now) <= self.cfg.purge_after:
                    continue

            self.log.debug("Expiring cache: %s", key)
            try:
                if self.cache.delete(key):
                    cnt += 1
            except CacheError as err:
                self.log.error("Cannot remove %s from cache: %s", key, err)

        self.log.info("Removed %d articles from the cache.", cnt)
        return cnt

    def _sweep_loop(self) -> None:
        """Clean the cache periodically, or when asked to."""
        self.log.debug("Sweep loop is starting up.")
        while self.active:
            self._purge.wait(self.sweep_interval.total_seconds())
            self._purge.clear()
            if not self.active:
                break
            try:
                self.sweep()
            except CacheError as err:
                self.log.error("Cache sweep failed: %s", err)
        self.log.debug("Sweep loop is quitting.")

    def install_signal_handlers(self) -> None:
        """Bind the control signals. Must be called from the main thread."""
        signal.signal(signal.SIGUSR1, lambda _sig, _frame: self.refresh_all())
        signal.signal(signal.SIGUSR2, lambda _sig, _frame: self.toggle_updates())
        signal.signal(signal.SIGHUP, lambda _sig, _frame: self.purge())
        signal.signal(signal.SIGTERM, lambda _sig, _frame: self.shutdown())
        signal.signal(signal.SIGINT, lambda _sig, _frame: self.shutdown())

    def start(self) -> None:
        """Start the workers, the cache sweep, and the web server.

        Then clean the cache and update all feeds once.
        """
        self.log.debug("Supervisor is starting.")
        self.active = True

        if self.server is not None:
            self.server.bind()
            srv = Thread(name="Web", target=self.server.serve, daemon=True)
            srv.start()
            self._threads.append(srv)

        sweeper = Thread(name="Sweeper", target=self._sweep_loop, daemon=True)
        sweeper.start()
        self._threads.append(sweeper)

        for w in self.workers.values():
            w.start()

        self.purge()
        self.refresh_all()

    def shutdown(self) -> None:
        """Make run() return."""
        self._shutdown.set()

    def stop(self) -> None:
        """Stop the workers, the cache sweep, and the web server."""
        self.log.debug("Supervisor is stopping.")
        self.active = False
        self._purge.set()
        for w in self.workers.values():
            w.stop(join_timeout)
        if self.server is not None:
            self.server.stop()
        for t in self._threads:
            t.join(join_timeout)
        self._threads.clear()

    def run(self) -> None:
        """Start everything, then wait until shutdown() is called."""
        self.start()
        try:
            self._shutdown.wait()
        finally:
            self.stop()
            self.cache.close()
        self.log.info("So long, and thanks for all the fish.")

# Local Variables: #
# python-indent: 4 #
# End: #

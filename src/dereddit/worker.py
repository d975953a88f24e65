#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-08 19:02:44 krylon>
#
# /data/code/python/dereddit/src/dereddit/worker.py
# created on 02. 12. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.worker

(c) 2025 Benjamin Walkenhorst

Each subreddit gets a worker thread of its own that periodically (or when
told to) downloads the subreddit's feed and generates our version of it.
"""


import logging
import pathlib
import time
from enum import Enum, auto
from threading import Event, Lock, Thread
from typing import Final, Optional, Protocol

from dereddit import common
from dereddit.client import FetchError
from dereddit.enrich import Enricher
from dereddit.extract import ExtractionError, parse_stub
from dereddit.feed import FeedBuilder
from dereddit.model import (EnrichmentError, EnrichmentResult, RawEntry,
                            Source, Stub)
from dereddit.policy import FilterPolicy


class FeedSource(Protocol):
    """FeedSource is what a worker needs to download a subreddit's feed."""

    def fetch(self, source: Source) -> list[RawEntry]:
        """Return the entries of the Source's feed."""

    def content_type(self, link: str) -> str:
        """Return the Content-Type the link is served as."""


class UpdateFlag:
    """UpdateFlag says if automatic updates are enabled. It is shared by all workers."""

    __slots__ = [
        "lock",
        "_enabled",
    ]

    lock: Lock
    _enabled: bool

    def __init__(self, enabled: bool = True) -> None:
        self.lock = Lock()
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        """Return True if automatic updates are enabled."""
        with self.lock:
            return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        with self.lock:
            self._enabled = value

    def toggle(self) -> bool:
        """Flip the flag and return its new value."""
        with self.lock:
            self._enabled = not self._enabled
            return self._enabled


class Trigger(Enum):
    """Trigger is the reason a worker wakes up."""

    Timer = auto()
    Manual = auto()


class WorkerState(Enum):
    """WorkerState tells what a worker is busy with."""

    Idle = auto()
    Polling = auto()
    Extracting = auto()
    Enriching = auto()
    Rendering = auto()


class SourceWorker:
    """SourceWorker generates the feed for one Source."""

    __slots__ = [
        "log",
        "lock",
        "source",
        "feeds",
        "enricher",
        "policy",
        "builder",
        "outdir",
        "flag",
        "_state",
        "_active",
        "_cycles",
        "_wakeup",
        "_thread",
    ]

    log: logging.Logger
    lock: Lock
    source: Source
    feeds: FeedSource
    enricher: Enricher
    policy: FilterPolicy
    builder: FeedBuilder
    outdir: pathlib.Path
    flag: UpdateFlag
    _state: WorkerState
    _active: bool
    _cycles: int
    _wakeup: Event
    _thread: Optional[Thread]

    def __init__(self,
                 source: Source,
                 *,
                 feeds: FeedSource,
                 enricher: Enricher,
                 policy: FilterPolicy,
                 builder: FeedBuilder,
                 outdir: pathlib.Path,
                 flag: UpdateFlag) -> None:
        self.log = common.get_logger(f"worker.{source.name}")
        self.lock = Lock()
        self.source = source
        self.feeds = feeds
        self.enricher = enricher
        self.policy = policy
        self.builder = builder
        self.outdir = outdir
        self.flag = flag
        self._state = WorkerState.Idle
        self._active = False
        self._cycles = 0
        self._wakeup = Event()
        self._thread = None

    @property
    def active(self) -> bool:
        """Return the worker's active flag."""
        with self.lock:
            return self._active

    @active.setter
    def active(self, value: bool) -> None:
        with self.lock:
            self._active = value

    @property
    def state(self) -> WorkerState:
        """Return what the worker is currently doing."""
        with self.lock:
            return self._state

    @state.setter
    def state(self, value: WorkerState) -> None:
        with self.lock:
            self._state = value

    @property
    def cycles(self) -> int:
        """Return the number of cycles the worker has run."""
        with self.lock:
            return self._cycles

    def start(self) -> None:
        """Start the worker thread."""
        self.log.debug("Launching worker for /r/%s", self.source.name)
        self.active = True
        self._thread = Thread(name=f"Worker-{self.source.name}",
                              target=self._loop,
                              daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the worker to quit. A running cycle is finished first."""
        self.active = False
        self._wakeup.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def trigger(self) -> None:
        """Ask the worker to update its feed as soon as it is idle.

        Triggers that arrive while the worker is busy are merged into one.
        """
        self._wakeup.set()

    def _loop(self) -> None:
        """Wait for the timer or a manual trigger, then update the feed."""
        interval: Final[float] = self.source.interval.total_seconds()
        deadline: float = time.monotonic() + interval
        while self.active:
            woken: bool = self._wakeup.wait(max(deadline - time.monotonic(), 0))
            if not self.active:
                break
            trigger: Trigger = Trigger.Manual
            if woken:
                self._wakeup.clear()
            else:
                # Ticks missed during a long cycle are dropped.
                now: float = time.monotonic()
                deadline += interval
                while deadline <= now:
                    deadline += interval
                trigger = Trigger.Timer
            try:
                self.handle(trigger)
            except Exception:  # pylint: disable-msg=W0718
                self.log.exception("Unexpected error updating /r/%s", self.source.name)
        self.log.debug("Worker for /r/%s is quitting.", self.source.name)

    def handle(self, trigger: Trigger) -> bool:
        """Run a cycle in response to the trigger, unless it should be ignored.

        Timer ticks are ignored while automatic updates are disabled, manual
        triggers are always honored. Return True if a cycle was run.
        """
        match trigger:
            case Trigger.Timer if not self.flag.enabled:
                self.log.info("ignoring tick to update /r/%s", self.source.name)
                return False
            case Trigger.Timer:
                self.log.info("received tick to update /r/%s", self.source.name)
            case Trigger.Manual:
                self.log.info("received signal to update /r/%s", self.source.name)

        self.cycle()
        return True

    def cycle(self) -> Optional[pathlib.Path]:
        """Fetch the Source's feed, process its entries, and write our feed.

        Return the path of the feed file, or None if the cycle was aborted.
        """
        try:
            self.state = WorkerState.Polling
            try:
                entries: list[RawEntry] = self.feeds.fetch(self.source)
            except FetchError as err:
                self.log.error("Cannot fetch feed for /r/%s: %s",
                               self.source.name,
                               err)
                return None

            self.state = WorkerState.Extracting
            stubs: list[Stub] = self._extract(entries)

            self.state = WorkerState.Enriching
            pairs: list[tuple[Stub, EnrichmentResult]] = []
            for stub in stubs:
                if not self.policy.should_keep(stub):
                    continue
                res: Optional[EnrichmentResult] = self._enrich(stub)
                if res is not None:
                    pairs.append((stub, res))

            self.state = WorkerState.Rendering
            feed = self.builder.build(self.source, pairs)
            try:
                path = self.builder.write(feed, self.outdir)
            except OSError as err:
                self.log.error("Cannot write feed for /r/%s to %s: %s",
                               self.source.name,
                               self.outdir,
                               err)
                return None

            self.log.info("Wrote %d of %d items for /r/%s to %s",
                          len(pairs),
                          len(entries),
                          self.source.name,
                          path)
            return path
        finally:
            with self.lock:
                self._cycles += 1
                self._state = WorkerState.Idle

    def _extract(self, entries: list[RawEntry]) -> list[Stub]:
        stubs: list[Stub] = []
        for entry in entries:
            try:
                stub: Stub = parse_stub(entry.description)
            except ExtractionError as err:
                self.log.error("Cannot parse entry \"%s\" of /r/%s: %s",
                               entry.title,
                               self.source.name,
                               err)
                continue
            if not stub.usable:
                self.log.debug("Entry \"%s\" of /r/%s has no link",
                               entry.title,
                               self.source.name)
                continue
            stubs.append(stub)
        return stubs

    def _enrich(self, stub: Stub) -> Optional[EnrichmentResult]:
        try:
            if self.feeds.content_type(stub.link).startswith("image/"):
                self.log.debug("Found image: %s", stub.link)
                return self.enricher.image(stub.link)
        except FetchError as err:
            self.log.debug("Cannot determine type of %s: %s", stub.link, err)

        try:
            return self.enricher.resolve(stub.link)
        except EnrichmentError as err:
            self.log.error("Cannot enrich %s for /r/%s: %s",
                           stub.link,
                           self.source.name,
                           err)
            return None

# Local Variables: #
# python-indent: 4 #
# End: #

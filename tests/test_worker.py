#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-11 11:36:47 krylon>
#
# /data/code/python/dereddit/tests/test_worker.py
# created on 02. 12. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.test_worker

(c) 2025 Benjamin Walkenhorst
"""

import os
import pathlib
import shutil
import time
import unittest
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta
from threading import Lock
from typing import Any, Callable, Final, Optional

from dereddit import common
from dereddit.cache import Cache
from dereddit.client import FetchError
from dereddit.config import Config
from dereddit.enrich import Enricher
from dereddit.feed import FeedBuilder
from dereddit.model import RawEntry, Source
from dereddit.policy import FilterPolicy
from dereddit.worker import SourceWorker, Trigger, UpdateFlag, WorkerState

test_dir: Final[str] = os.path.join(
    "/tmp",
    datetime.now().strftime(f"{common.AppName}_test_worker_%Y%m%d_%H%M%S_%f"))


def entry(num: int, user: str = "gopher", self_post: bool = False) -> RawEntry:
    """Create a feed entry the way reddit does."""
    comments = f"https://www.reddit.com/r/golang/comments/{num}/"
    link = comments if self_post else f"https://example.com/article/{num}"
    desc = f"""submitted by <a href="https://www.reddit.com/user/{user}"> /u/{user} </a> <br/>
<span><a href="{link}">[link]</a></span> <span><a href="{comments}">[{num} comments]</a></span>"""
    return RawEntry(title=f"Post {num}", description=desc)


class FakeFeeds:
    """FakeFeeds hands out canned feed entries."""

    def __init__(self, entries: list[RawEntry]) -> None:
        self.lock = Lock()
        self.entries = entries
        self.fetched = 0
        self.broken = False
        self.images: set[str] = set()
        self.surprises = 0

    def fetch(self, source: Source) -> list[RawEntry]:
        """Return the canned entries."""
        with self.lock:
            self.fetched += 1
            if self.surprises > 0:
                self.surprises -= 1
                raise RuntimeError("something nobody expected")
        if self.broken:
            raise FetchError(f"GET {source.feed_url} failed: connection refused")
        return list(self.entries)

    def content_type(self, link: str) -> str:
        """Pretend everything is a web page, except the images."""
        if link in self.images:
            return "image/png"
        return "text/html; charset=utf-8"


class FakeService:
    """FakeService pretends to be the content service."""

    def __init__(self) -> None:
        self.lock = Lock()
        self.calls: list[str] = []
        self.broken: set[str] = set()

    def parse(self, link: str) -> dict[str, Any]:
        """Return a canned article for the link."""
        with self.lock:
            self.calls.append(link)
        if link in self.broken:
            raise FetchError(f"GET {link} failed: 500 Internal Server Error")
        return {"title": f"Title of {link}", "content": "<p>Text</p>", "author": ""}

    def confidence(self, _link: str) -> float:
        """Be very confident."""
        return 1.0


def wait_for(cond: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Wait until cond() returns True, or the timeout expires."""
    deadline: Final[float] = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if cond():
            return True
        time.sleep(0.01)
    return cond()


class TestSourceWorker(unittest.TestCase):
    """Test the SourceWorker."""

    cache: Optional[Cache] = None
    outdir: pathlib.Path = pathlib.Path(test_dir, "feeds")

    @classmethod
    def setUpClass(cls) -> None:
        """Prepare the testing environment."""
        common.set_basedir(test_dir)
        cls.outdir.mkdir(parents=True, exist_ok=True)
        cls.cache = Cache(os.path.join(test_dir, "cache"))

    @classmethod
    def tearDownClass(cls) -> None:
        """Clean up afterwards."""
        if cls.cache is not None:
            cls.cache.close()
        shutil.rmtree(test_dir, ignore_errors=True)

    def setUp(self) -> None:
        assert self.cache is not None
        for key in list(self.cache.keys()):
            self.cache.delete(key)
        for f in self.outdir.glob("*.xml"):
            f.unlink()

    def worker(self,
               feeds: FakeFeeds,
               svc: FakeService,
               flag: Optional[UpdateFlag] = None,
               interval: timedelta = timedelta(minutes=30),
               outdir: Optional[pathlib.Path] = None,
               **kwargs) -> SourceWorker:
        """Create a SourceWorker for /r/golang."""
        assert self.cache is not None
        cfg = Config(token="secret", sources=("golang", ), **kwargs)
        return SourceWorker(Source(name="golang", interval=interval),
                            feeds=feeds,
                            enricher=Enricher(self.cache, svc),
                            policy=FilterPolicy(cfg, svc.confidence),
                            builder=FeedBuilder(),
                            outdir=outdir if outdir is not None else self.outdir,
                            flag=flag if flag is not None else UpdateFlag())

    def items(self) -> list[ET.Element]:
        """Return the items of the generated feed."""
        root = ET.parse(self.outdir.joinpath("golang.xml")).getroot()
        return root.findall("channel/item")

    def test_01_filtering(self) -> None:
        """Test a feed with a self post, a post by a blacklisted user, and a regular post."""
        feeds = FakeFeeds([entry(1, self_post=True), entry(2, user="troll"), entry(3)])
        svc = FakeService()
        w = self.worker(feeds, svc, blacklist=frozenset({"troll"}))

        path = w.cycle()
        self.assertEqual(path, self.outdir.joinpath("golang.xml"))
        items = self.items()
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].findtext("link"), "https://example.com/article/3")
        self.assertEqual(items[0].findtext("title"),
                         "Title of https://example.com/article/3")
        self.assertEqual(items[0].findtext("author"), "submitted by gopher")
        self.assertEqual(svc.calls, ["https://example.com/article/3"])
        self.assertEqual(w.state, WorkerState.Idle)
        self.assertEqual(w.cycles, 1)

    def test_02_enrichment_failure(self) -> None:
        """Test that an article we cannot enrich is skipped, and the others are kept."""
        feeds = FakeFeeds([entry(i) for i in range(1, 6)])
        svc = FakeService()
        svc.broken.add("https://example.com/article/3")
        w = self.worker(feeds, svc)

        self.assertIsNotNone(w.cycle())
        links = [i.findtext("link") for i in self.items()]
        self.assertEqual(links, [f"https://example.com/article/{i}" for i in (1, 2, 4, 5)])

    def test_03_fetch_failure(self) -> None:
        """Test that a feed we cannot fetch aborts the cycle, but not the worker."""
        feeds = FakeFeeds([entry(1)])
        feeds.broken = True
        svc = FakeService()
        w = self.worker(feeds, svc)

        self.assertIsNone(w.cycle())
        self.assertFalse(self.outdir.joinpath("golang.xml").exists())
        self.assertEqual(w.state, WorkerState.Idle)
        self.assertEqual(svc.calls, [])

        feeds.broken = False
        self.assertIsNotNone(w.cycle())
        self.assertEqual(len(self.items()), 1)

    def test_04_toggle(self) -> None:
        """Test that timer ticks are ignored while automatic updates are off."""
        feeds = FakeFeeds([entry(1)])
        flag = UpdateFlag()
        w = self.worker(feeds, FakeService(), flag=flag)

        self.assertFalse(flag.toggle())
        self.assertFalse(w.handle(Trigger.Timer))
        self.assertEqual(feeds.fetched, 0)
        self.assertTrue(w.handle(Trigger.Manual))
        self.assertEqual(feeds.fetched, 1)

        self.assertTrue(flag.toggle())
        self.assertTrue(w.handle(Trigger.Timer))
        self.assertEqual(feeds.fetched, 2)

    def test_05_thread_timer(self) -> None:
        """Test the worker thread runs cycles on its timer."""
        feeds = FakeFeeds([entry(1)])
        w = self.worker(feeds, FakeService(), interval=timedelta(milliseconds=50))
        w.start()
        try:
            self.assertTrue(wait_for(lambda: w.cycles >= 2))
        finally:
            w.stop(5.0)
        self.assertEqual(len(self.items()), 1)

    def test_06_thread_toggle(self) -> None:
        """Test that a manual trigger works while automatic updates are off."""
        feeds = FakeFeeds([entry(1)])
        flag = UpdateFlag(False)
        w = self.worker(feeds, FakeService(), flag=flag, interval=timedelta(milliseconds=20))
        w.start()
        try:
            time.sleep(0.2)
            self.assertEqual(w.cycles, 0)
            self.assertEqual(feeds.fetched, 0)

            w.trigger()
            self.assertTrue(wait_for(lambda: w.cycles == 1))
            time.sleep(0.1)
            self.assertEqual(w.cycles, 1)
        finally:
            w.stop(5.0)

    def test_07_coalesce(self) -> None:
        """Test that triggers piling up while the worker is busy are merged."""
        feeds = FakeFeeds([entry(1)])
        w = self.worker(feeds, FakeService(), flag=UpdateFlag(False))
        for _ in range(5):
            w.trigger()
        w.start()
        try:
            self.assertTrue(wait_for(lambda: w.cycles == 1))
            time.sleep(0.1)
            self.assertEqual(w.cycles, 1)
        finally:
            w.stop(5.0)

    def test_08_bad_entries(self) -> None:
        """Test that entries we cannot parse, or that have no link, are skipped."""
        feeds = FakeFeeds([RawEntry(title="broken", description=None),  # type: ignore
                           RawEntry(title="no link", description="<p>Hello</p>"),
                           entry(2)])
        w = self.worker(feeds, FakeService())
        self.assertIsNotNone(w.cycle())
        self.assertEqual([i.findtext("link") for i in self.items()],
                         ["https://example.com/article/2"])

    def test_09_image(self) -> None:
        """Test that links to images are not sent to the content service."""
        feeds = FakeFeeds([entry(1)])
        feeds.images.add("https://example.com/article/1")
        svc = FakeService()
        w = self.worker(feeds, svc)
        self.assertIsNotNone(w.cycle())
        items = self.items()
        self.assertEqual(items[0].findtext("title"), "Image")
        self.assertEqual(svc.calls, [])

    def test_10_write_failure(self) -> None:
        """Test that a feed we cannot write does not take down the worker."""
        feeds = FakeFeeds([entry(1)])
        w = self.worker(feeds, FakeService(), outdir=pathlib.Path(test_dir, "nonexistent"))
        self.assertIsNone(w.cycle())
        self.assertEqual(w.state, WorkerState.Idle)

    def test_11_unexpected_error(self) -> None:
        """Test that the worker thread survives an error nobody anticipated."""
        feeds = FakeFeeds([entry(1)])
        feeds.surprises = 1
        w = self.worker(feeds, FakeService(), flag=UpdateFlag(False))
        w.start()
        try:
            w.trigger()
            self.assertTrue(wait_for(lambda: w.cycles == 1))
            self.assertEqual(w.state, WorkerState.Idle)
            self.assertFalse(self.outdir.joinpath("golang.xml").exists())

            w.trigger()
            self.assertTrue(wait_for(lambda: w.cycles == 2))
            self.assertEqual(feeds.fetched, 2)
            self.assertEqual(len(self.items()), 1)
        finally:
            w.stop(5.0)

# Local Variables: #
# python-indent: 4 #
# End: #

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-11 19:27:41 krylon>
#
# /data/code/python/dereddit/tests/test_model.py
# created on 29. 11. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.test_model

(c) 2025 Benjamin Walkenhorst
"""

import unittest
from datetime import datetime, timedelta, timezone
from typing import Final

from dereddit.model import (EnrichmentError, EnrichmentResult, OutputItem,
                            Source, Stub)

stamp: Final[datetime] = datetime(2025, 11, 29, 10, 0, 0, tzinfo=timezone.utc)


class TestModel(unittest.TestCase):
    """Test the model classes."""

    def test_01_source(self) -> None:
        """Test the URLs derived from a Source."""
        src = Source(name="golang")
        self.assertEqual(src.feed_url, "https://www.reddit.com/r/golang/.rss")
        self.assertEqual(src.link, "https://www.reddit.com/r/golang")

        src = Source(name="python", url_template="http://localhost:9999/{name}.rss")
        self.assertEqual(src.feed_url, "http://localhost:9999/python.rss")

    def test_02_from_response(self) -> None:
        """Test decoding a complete response."""
        data = {
            "author": "Rob Pike",
            "content": "<p>Simplicity is complicated.</p>",
            "domain": "go.dev",
            "title": "Simplicity",
            "excerpt": "Simplicity is complicated.",
            "direction": "ltr",
            "word_count": 3,
            "total_pages": 1,
            "next_page_id": None,
            "confidence": 0.8,
        }
        res = EnrichmentResult.from_response(data, stamp)
        self.assertEqual(res.author, "Rob Pike")
        self.assertEqual(res.title, "Simplicity")
        self.assertEqual(res.content, "<p>Simplicity is complicated.</p>")
        self.assertEqual(res.domain, "go.dev")
        self.assertEqual(res.word_count, 3)
        self.assertEqual(res.total_pages, 1)
        self.assertEqual(res.confidence, 0.8)
        self.assertEqual(res.captured, stamp)

    def test_03_from_partial_response(self) -> None:
        """Test that missing or mistyped fields fall back to defaults."""
        res = EnrichmentResult.from_response({"title": 42, "word_count": "many",
                                              "confidence": True}, stamp)
        self.assertEqual(res.title, "")
        self.assertEqual(res.word_count, 0)
        self.assertIsNone(res.confidence)

        res = EnrichmentResult.from_response({}, stamp)
        self.assertEqual(res, EnrichmentResult(captured=stamp))

    def test_04_not_an_object(self) -> None:
        """Test that a response that is not an object is rejected."""
        for data in (None, [], "text", 42):
            with self.subTest(data=data):
                with self.assertRaises(EnrichmentError):
                    EnrichmentResult.from_response(data)

    def test_05_age(self) -> None:
        """Test computing the age of a result."""
        res = EnrichmentResult(captured=stamp)
        self.assertEqual(res.age(stamp + timedelta(days=2)), timedelta(days=2))

    def test_06_output_item(self) -> None:
        """Test combining a Stub and its enrichment."""
        stub = Stub(link="https://example.com/x",
                    comments="https://www.reddit.com/r/golang/comments/1/",
                    user="gopher")
        item = OutputItem.from_pair(stub, EnrichmentResult(title="X", content="<p>x</p>"))
        self.assertEqual(item.title, "X")
        self.assertEqual(item.link, stub.link)
        self.assertEqual(item.guid, stub.link)
        self.assertEqual(item.comments, stub.comments)
        self.assertEqual(item.description, "<p>x</p>")
        self.assertEqual(item.author, "submitted by gopher")

        item = OutputItem.from_pair(stub, EnrichmentResult(title="X", author="Jane"))
        self.assertEqual(item.author, "Jane")

    def test_07_stub(self) -> None:
        """Test the Stub's properties."""
        self.assertFalse(Stub().usable)
        self.assertTrue(Stub(link="a", comments="a").is_self_post)
        self.assertFalse(Stub(link="a", comments="b").is_self_post)

# Local Variables: #
# python-indent: 4 #
# End: #

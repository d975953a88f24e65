#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-06 16:11:02 krylon>
#
# /data/code/python/dereddit/src/dereddit/model.py
# created on 29. 11. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.model

(c) 2025 Benjamin Walkenhorst
"""


from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Final, Optional

from dereddit import common
from dereddit.config import feed_url

reddit_base: Final[str] = "https://www.reddit.com/r"


class EnrichmentError(common.DeredditError):
    """EnrichmentError indicates a response from the content service we cannot use."""


def utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


@dataclass(kw_only=True, slots=True)
class Source:
    """Source is a subreddit we generate a feed for."""

    name: str
    interval: timedelta = timedelta(minutes=30)
    url_template: str = feed_url

    @property
    def feed_url(self) -> str:
        """Return the URL of the subreddit's own feed."""
        return self.url_template.format(name=self.name)

    @property
    def link(self) -> str:
        """Return the URL of the subreddit's front page."""
        return f"{reddit_base}/{self.name}"


@dataclass(kw_only=True, slots=True)
class RawEntry:
    """RawEntry is an entry as it appears in the subreddit's feed."""

    title: str
    description: str


@dataclass(kw_only=True, slots=True)
class Stub:
    """Stub holds the links and the submitter extracted from a RawEntry."""

    link: str = ""
    comments: str = ""
    user: str = ""

    @property
    def is_self_post(self) -> bool:
        """Return True if the Stub points to the discussion itself."""
        return self.link == self.comments

    @property
    def usable(self) -> bool:
        """Return True if the Stub has a link to enrich."""
        return self.link != ""


def _str(data: dict[str, Any], key: str) -> str:
    val = data.get(key)
    return val if isinstance(val, str) else ""


def _int(data: dict[str, Any], key: str) -> int:
    val = data.get(key)
    if isinstance(val, bool):
        return 0
    if isinstance(val, (int, float)):
        return int(val)
    return 0


@dataclass(kw_only=True, slots=True)
class EnrichmentResult:
    """EnrichmentResult is the full content of an article, as delivered by the content service."""

    author: str = ""
    title: str = ""
    content: str = ""
    excerpt: str = ""
    domain: str = ""
    word_count: int = 0
    total_pages: int = 0
    confidence: Optional[float] = None
    captured: datetime = field(default_factory=utcnow)

    @classmethod
    def from_response(cls, data: Any, captured: Optional[datetime] = None) -> 'EnrichmentResult':
        """Create an EnrichmentResult from the decoded JSON response of the content service.

        Missing fields are replaced by empty defaults. A payload that is not a
        JSON object raises EnrichmentError.
        """
        if not isinstance(data, dict):
            raise EnrichmentError(
                f"Expected a JSON object, got {data.__class__.__name__}")

        conf = data.get("confidence")
        return cls(
            author=_str(data, "author"),
            title=_str(data, "title"),
            content=_str(data, "content"),
            excerpt=_str(data, "excerpt"),
            domain=_str(data, "domain"),
            word_count=_int(data, "word_count"),
            total_pages=_int(data, "total_pages"),
            confidence=float(conf) if isinstance(conf, (int, float))
            and not isinstance(conf, bool) else None,
            captured=captured if captured is not None else utcnow(),
        )

    def age(self, now: Optional[datetime] = None) -> timedelta:
        """Return the time passed since the result was captured."""
        if now is None:
            now = utcnow()
        return now - self.captured


@dataclass(kw_only=True, slots=True)
class OutputItem:
    """OutputItem is an item in a generated feed."""

    title: str
    link: str
    description: str
    author: str = ""
    comments: str = ""
    guid: str = ""

    @classmethod
    def from_pair(cls, stub: Stub, res: EnrichmentResult) -> 'OutputItem':
        """Combine a Stub and its enrichment into an OutputItem."""
        return cls(
            title=res.title,
            link=stub.link,
            description=res.content,
            author=res.author if res.author != "" else f"submitted by {stub.user}",
            comments=stub.comments,
            guid=stub.link,
        )


@dataclass(kw_only=True, slots=True)
class OutputFeed:
    """OutputFeed is the feed we generate for one Source."""

    title: str
    link: str
    description: str
    generator: str
    docs: str = "http://blogs.law.harvard.edu/tech/rss"
    language: str = "en-us"
    pub_date: str = ""
    last_build: str = ""
    items: list[OutputItem] = field(default_factory=list)

# Local Variables: #
# python-indent: 4 #
# End: #

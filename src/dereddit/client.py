#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-07 13:05:44 krylon>
#
# /data/code/python/dereddit/src/dereddit/client.py
# created on 30. 11. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.client

(c) 2025 Benjamin Walkenhorst

Clients for the remote services we talk to: reddit's feeds, and the content
service that turns a link into a readable article.
"""


import logging
from typing import Any, Final, Optional

import fastfeedparser as ffp  # type: ignore # pylint: disable-msg=E0401
import requests

from dereddit import common
from dereddit.config import readability_url
from dereddit.model import EnrichmentError, RawEntry, Source

user_agent: Final[str] = f"{common.AppName}/{common.AppVersion} (full-text feed generator)"


class FetchError(common.DeredditError):
    """FetchError indicates a remote service could not be reached or refused our request."""


class ConfidenceLookupError(common.DeredditError):
    """ConfidenceLookupError indicates we could not find out how well an article can be parsed."""


def new_session() -> requests.Session:
    """Create a Session with our User-Agent set."""
    s = requests.Session()
    s.headers["User-Agent"] = user_agent
    return s


def _get(session: requests.Session,
         url: str,
         params: Optional[dict[str, str]] = None,
         timeout: Optional[float] = None) -> requests.Response:
    try:
        res = session.get(url, params=params, timeout=timeout)
        res.raise_for_status()
    except requests.RequestException as err:
        raise FetchError(f"GET {url} failed: {err}") from err
    return res


class FeedClient:
    """FeedClient downloads the feeds of subreddits."""

    __slots__ = [
        "log",
        "session",
        "timeout",
    ]

    log: logging.Logger
    session: requests.Session
    timeout: Optional[float]

    def __init__(self,
                 session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None) -> None:
        self.log = common.get_logger("feeds")
        self.session = session if session is not None else new_session()
        self.timeout = timeout

    def fetch(self, source: Source) -> list[RawEntry]:
        """Download the Source's feed and return its entries, in order."""
        url: Final[str] = source.feed_url
        self.log.debug("Fetch feed for /r/%s from %s", source.name, url)
        res = _get(self.session, url, timeout=self.timeout)

        try:
            rss = ffp.parse(res.content)
        except (ValueError, SyntaxError) as err:
            raise FetchError(f"Cannot parse feed of /r/{source.name}: {err}") from err

        entries: list[RawEntry] = []
        for art in rss.entries:
            entries.append(RawEntry(title=art.get("title", ""),
                                    description=self._item_description(art)))
        self.log.debug("Got %d entries for /r/%s", len(entries), source.name)
        return entries

    def _item_description(self, article) -> str:
        """Try to get the HTML body of an Atom/RSS item.

        For Atom entries, the description holds the text with all markup
        stripped, so the content goes first.
        """
        desc: str = ""
        if article.get("content") and article["content"][0].get("value"):
            desc = article["content"][0]["value"]
        elif article.get("description"):
            desc = article["description"]
        else:
            self.log.info("Did not find description or content in article \"%s\"",
                          article.get("title", ""))

        return desc

    def content_type(self, link: str) -> str:
        """Return the Content-Type the link is served as."""
        try:
            res = self.session.head(link, allow_redirects=True, timeout=self.timeout)
            res.raise_for_status()
        except requests.RequestException as err:
            raise FetchError(f"HEAD {link} failed: {err}") from err
        return res.headers.get("Content-Type", "")


class ReadabilityClient:
    """ReadabilityClient talks to the content service."""

    __slots__ = [
        "log",
        "token",
        "base_url",
        "session",
        "timeout",
    ]

    log: logging.Logger
    token: str
    base_url: str
    session: requests.Session
    timeout: Optional[float]

    def __init__(self,
                 token: str,
                 base_url: str = readability_url,
                 session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None) -> None:
        self.log = common.get_logger("readability")
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else new_session()
        self.timeout = timeout

    def parse(self, link: str) -> dict[str, Any]:
        """Ask the content service for the article behind the link."""
        self.log.debug("Fetching: %s", link)
        res = _get(self.session,
                   f"{self.base_url}/parser",
                   params={"token": self.token, "url": link},
                   timeout=self.timeout)
        try:
            data = res.json()
        except ValueError as err:
            raise EnrichmentError(f"Invalid response for {link}: {err}") from err
        if not isinstance(data, dict):
            raise EnrichmentError(
                f"Invalid response for {link}: expected an object, got {data.__class__.__name__}")
        return data

    def confidence(self, link: str) -> float:
        """Ask the content service how confident it is it can parse the link."""
        res = _get(self.session,
                   f"{self.base_url}/confidence",
                   params={"url": link},
                   timeout=self.timeout)
        try:
            data = res.json()
        except ValueError as err:
            raise ConfidenceLookupError(f"Invalid response for {link}: {err}") from err

        match data:
            case {"confidence": bool()}:
                pass
            case {"confidence": int(x) | float(x)}:
                return float(x)

        raise ConfidenceLookupError(f"Response for {link} carries no confidence")

# Local Variables: #
# python-indent: 4 #
# End: #

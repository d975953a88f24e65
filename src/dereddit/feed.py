#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-07 17:15:36 krylon>
#
# /data/code/python/dereddit/src/dereddit/feed.py
# created on 01. 12. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.feed

(c) 2025 Benjamin Walkenhorst

Assemble and write the RSS feeds we generate.
"""


import io
import logging
import os
import pathlib
import re
import tempfile
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from datetime import datetime
from email.utils import format_datetime
from typing import Final, Optional, Union

from dereddit import common
from dereddit.model import EnrichmentResult, OutputFeed, OutputItem, Source, Stub, utcnow

rss_version: Final[str] = "2.0"
illegal_pat: Final[re.Pattern] = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def rfc822(stamp: datetime) -> str:
    """Format a timestamp the way RSS wants it."""
    return format_datetime(stamp)


def xml_text(text: str) -> str:
    """Replace characters XML 1.0 does not allow with U+FFFD."""
    return illegal_pat.sub("\ufffd", text)


class FeedBuilder:
    """FeedBuilder turns the articles we collected for a Source into an RSS feed."""

    __slots__ = [
        "log",
        "generator",
    ]

    log: logging.Logger
    generator: str

    def __init__(self, generator: str = f"{common.AppName} v{common.AppVersion}") -> None:
        self.log = common.get_logger("feed")
        self.generator = generator

    def build(self,
              source: Source,
              pairs: Iterable[tuple[Stub, EnrichmentResult]],
              now: Optional[datetime] = None) -> OutputFeed:
        """Create the feed for a Source, with one item per pair, in the given order."""
        stamp: Final[str] = rfc822(now if now is not None else utcnow())
        return OutputFeed(
            title=source.name,
            link=source.link,
            description=f"Articles pulled from /r/{source.name}",
            generator=self.generator,
            pub_date=stamp,
            last_build=stamp,
            items=[OutputItem.from_pair(stub, res) for stub, res in pairs],
        )

    def render(self, feed: OutputFeed) -> bytes:
        """Serialize the feed as an RSS 2.0 document."""
        rss = ET.Element("rss", version=rss_version)
        chan = ET.SubElement(rss, "channel")

        for tag, val in (("title", feed.title),
                         ("link", feed.link),
                         ("description", feed.description),
                         ("docs", feed.docs),
                         ("language", feed.language),
                         ("generator", feed.generator),
                         ("pubDate", feed.pub_date),
                         ("lastBuildDate", feed.last_build)):
            ET.SubElement(chan, tag).text = xml_text(val)

        for item in feed.items:
            node = ET.SubElement(chan, "item")
            for tag, val, optional in (("title", item.title, False),
                                       ("link", item.link, False),
                                       ("description", item.description, False),
                                       ("author", item.author, True),
                                       ("comments", item.comments, True),
                                       ("guid", item.guid, True)):
                if optional and val == "":
                    continue
                el = ET.SubElement(node, tag)
                el.text = xml_text(val)
                if tag == "guid":
                    el.set("isPermaLink", "true")

        ET.indent(rss, space="\t")
        buf = io.BytesIO()
        ET.ElementTree(rss).write(buf, encoding="utf-8", xml_declaration=True)
        buf.write(b"\n")
        return buf.getvalue()

    def write(self, feed: OutputFeed, directory: Union[str, pathlib.Path]) -> pathlib.Path:
        """Write the feed to <directory>/<title>.xml, replacing the previous version."""
        folder: Final[pathlib.Path] = pathlib.Path(directory)
        target: Final[pathlib.Path] = folder.joinpath(f"{feed.title}.xml")
        data: Final[bytes] = self.render(feed)

        fd, tmp = tempfile.mkstemp(dir=folder, prefix=f".{feed.title}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.chmod(tmp, 0o644)
            os.replace(tmp, target)
        except BaseException:
            try:
                os.unlink(tmp)
            except FileNotFoundError:
                pass
            raise

        self.log.debug("Wrote %d items (%d bytes) to %s",
                       len(feed.items),
                       len(data),
                       target)
        return target

# Local Variables: #
# python-indent: 4 #
# End: #

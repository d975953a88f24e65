#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-06 16:34:50 krylon>
#
# /data/code/python/dereddit/src/dereddit/extract.py
# created on 29. 11. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.extract

(c) 2025 Benjamin Walkenhorst

Extract the links and the submitter from the HTML snippet reddit puts in the
description of each feed entry. It looks roughly like this:

    submitted by <a href="https://www.reddit.com/user/someone"> /u/someone </a> <br/>
    <span><a href="https://example.com/article">[link]</a></span>
    <span><a href="https://www.reddit.com/r/golang/comments/...">[42 comments]</a></span>
"""


import re
from typing import Final

from bs4 import BeautifulSoup, ParserRejectedMarkup

from dereddit import common
from dereddit.model import Stub

link_marker: Final[str] = "[link]"
comments_pat: Final[re.Pattern] = re.compile(r"comments?\]$", re.I)
user_pat: Final[re.Pattern] = \
    re.compile(r"^(?:https?://(?:www\.|old\.)?reddit\.com)?/u(?:ser)?/", re.I)
user_prefix_pat: Final[re.Pattern] = re.compile(r"^/?u/")


class ExtractionError(common.DeredditError):
    """ExtractionError indicates an entry description we could not parse at all."""


def parse_stub(description: str) -> Stub:
    """Extract a Stub from the HTML fragment of a feed entry.

    If the fragment contains no [link] anchor, the Stub's link is empty.
    """
    if not isinstance(description, str):
        raise ExtractionError(
            f"Entry description must be a string, not {description.__class__.__name__}")

    try:
        soup = BeautifulSoup(description, "html.parser")
    except ParserRejectedMarkup as err:
        raise ExtractionError(f"Cannot parse entry description: {err}") from err

    stub: Stub = Stub()
    for a in soup.find_all("a"):
        href = a.get("href")
        if not isinstance(href, str):
            continue
        text: str = a.get_text().strip()
        if text == link_marker:
            stub.link = href
        elif comments_pat.search(text) is not None:
            stub.comments = href
        elif user_pat.match(href) is not None:
            stub.user = user_prefix_pat.sub("", text).strip()

    return stub

# Local Variables: #
# python-indent: 4 #
# End: #

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-07 15:32:58 krylon>
#
# /data/code/python/dereddit/src/dereddit/policy.py
# created on 01. 12. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.policy

(c) 2025 Benjamin Walkenhorst
"""


import logging
from collections.abc import Callable
from typing import NamedTuple, Optional

from dereddit import common
from dereddit.client import ConfidenceLookupError, FetchError
from dereddit.config import Config
from dereddit.model import Stub


class Verdict(NamedTuple):
    """Verdict is the FilterPolicy's decision on a Stub."""

    keep: bool
    reason: str = ""


KEEP = Verdict(True)


class FilterPolicy:
    """FilterPolicy decides which posts make it into the generated feeds.

    We drop self posts (unless they are explicitly allowed), posts by
    blacklisted users, and links the content service is not confident it
    can parse.
    """

    __slots__ = [
        "log",
        "cfg",
        "confidence",
    ]

    log: logging.Logger
    cfg: Config
    confidence: Optional[Callable[[str], float]]

    def __init__(self, cfg: Config, confidence: Optional[Callable[[str], float]] = None) -> None:
        self.log = common.get_logger("policy")
        self.cfg = cfg
        self.confidence = confidence

    def evaluate(self, stub: Stub) -> Verdict:
        """Decide whether to keep the Stub, and if not, why."""
        if stub.is_self_post and not self.cfg.allow_self_posts:
            return self._drop(stub, "self post")

        if stub.user in self.cfg.blacklist:
            return self._drop(stub, f"bad user: {stub.user}")

        if self.confidence is None or self.cfg.confidence <= 0:
            return KEEP

        # If we can't get the confidence for some reason, just keep chugging.
        try:
            score: float = self.confidence(stub.link)
        except (ConfidenceLookupError, FetchError) as err:
            self.log.info("Cannot get confidence for %s, keeping it: %s",
                          stub.link,
                          err)
            return KEEP

        if score < self.cfg.confidence:
            return self._drop(stub, "below confidence")

        return KEEP

    def should_keep(self, stub: Stub) -> bool:
        """Return True if the Stub should be kept."""
        return self.evaluate(stub).keep

    def _drop(self, stub: Stub, reason: str) -> Verdict:
        self.log.debug("Ignoring: %s (%s)", stub.link, reason)
        return Verdict(False, reason)

# Local Variables: #
# python-indent: 4 #
# End: #

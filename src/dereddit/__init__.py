#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-11-29 13:12:40 krylon>
#
# /data/code/python/dereddit/src/dereddit/__init__.py
# created on 29. 11. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit

(c) 2025 Benjamin Walkenhorst

dereddit watches subreddits and generates RSS feeds that carry the full text
of the linked articles instead of a link to the discussion.
"""

# Local Variables: #
# python-indent: 4 #
# End: #

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-09 18:03:56 krylon>
#
# /data/code/python/dereddit/src/dereddit/main.py
# created on 04. 12. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.main

(c) 2025 Benjamin Walkenhorst
"""


import argparse
import logging
import sys
from typing import Optional

from dereddit import common
from dereddit.cache import CacheError
from dereddit.config import Config, ConfigError
from dereddit.supervisor import Supervisor
from dereddit.web import WebError

epilog: str = """
Updates can be triggered by sending SIGUSR1.
Automatic updates can be toggled by sending SIGUSR2.
A cache purge can be triggered by sending SIGHUP.
"""


def make_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    argp: argparse.ArgumentParser = argparse.ArgumentParser(
        prog=common.AppName,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter)
    argp.add_argument("-a", "--api-key",
                      default="",
                      help="API key for the content service")
    argp.add_argument("-r", "--subreddits",
                      default="golang",
                      help="Comma separated list of subreddits to create rss feeds for")
    argp.add_argument("-u", "--update",
                      type=int,
                      default=30,
                      help="Update interval (in minutes)")
    argp.add_argument("-n", "--no-listen",
                      action="store_true",
                      help="Don't start the internal HTTP server")
    argp.add_argument("-l", "--listen",
                      default=":8080",
                      help="Address to listen on")
    argp.add_argument("-U", "--users",
                      default="",
                      help="Comma separated list of users to ignore")
    argp.add_argument("-s", "--self-posts",
                      action="store_true",
                      help="Allow self posts into generated feed")
    argp.add_argument("-P", "--purge",
                      type=int,
                      default=7,
                      help="Time to purge articles after, in days")
    argp.add_argument("-d", "--dir",
                      default=str(common.path.feeds),
                      help="Directory to output rss feeds to")
    argp.add_argument("-C", "--cache",
                      default=str(common.path.cache),
                      help="Directory to keep the article cache in")
    argp.add_argument("-v", "--verbose",
                      action="store_true",
                      help="Print additional information")
    argp.add_argument("-c", "--confidence",
                      type=float,
                      default=0.5,
                      help="Confidence threshold. Articles with parse confidence "
                      "below this are not included")
    return argp


def main(argv: Optional[list[str]] = None) -> None:
    """Run the dereddit application."""
    args = make_parser().parse_args(argv)
    common.set_debug(args.verbose)
    log: logging.Logger = common.get_logger("main")

    try:
        cfg: Config = Config.from_args(args)
    except ConfigError as err:
        log.critical("%s", err)
        sys.exit(1)

    log.info("watching subreddits: %s", ", ".join(cfg.sources))
    log.info("ignoring users: %s", ", ".join(sorted(cfg.blacklist)))
    log.info("confidence set to %f", cfg.confidence)

    try:
        cfg.ensure_dirs()
    except OSError as err:
        log.critical("Cannot create directories: %s", err)
        sys.exit(1)

    try:
        sup: Supervisor = Supervisor(cfg)
        log.info("cache dir '%s' opened", cfg.cache_dir)
        log.info("outputting rss feeds to '%s'", cfg.output_dir)
        sup.install_signal_handlers()
        sup.run()
    except (CacheError, WebError) as err:
        log.critical("%s", err)
        sys.exit(1)


if __name__ == '__main__':
    main()

# Local Variables: #
# python-indent: 4 #
# End: #

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2025-12-07 11:20:13 krylon>
#
# /data/code/python/dereddit/src/dereddit/cache.py
# created on 30. 11. 2025
# (c) 2025 Benjamin Walkenhorst
#
# This file is part of the dereddit feed generator. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
dereddit.cache

(c) 2025 Benjamin Walkenhorst

Persistent storage for the articles we got from the content service, so we
do not have to ask for the same link twice.
"""


import hashlib
import logging
import pathlib
import pickle
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Final, Optional, Union

import lmdb

from dereddit import common
from dereddit.model import EnrichmentResult

db_name: Final[bytes] = b"article"


class CacheError(common.DeredditError):
    """Exception class to indicate errors in the caching layer"""


class TxError(CacheError):
    """TxError indicates an error related to transaction-handling."""


def key_for(link: str) -> str:
    """Derive the cache key for a link."""
    return hashlib.sha256(link.strip().encode()).hexdigest()


@dataclass(kw_only=True, slots=True)
class Tx:
    """Tx wraps a database transaction."""

    log: logging.Logger
    tx: lmdb.Transaction
    rw: bool

    def __getitem__(self, key: str) -> Optional[EnrichmentResult]:
        val = self.tx.get(key.encode())
        if val is None:
            return None

        try:
            item = pickle.loads(val)
        except (pickle.UnpicklingError, EOFError, AttributeError,
                ImportError, IndexError, TypeError, ValueError) as err:
            raise CacheError(f"Cannot decode cached item {key}: {err}") from err

        if not isinstance(item, EnrichmentResult):
            raise CacheError(
                f"Cached item {key} is a {item.__class__.__name__}, not an EnrichmentResult")
        return item

    def __setitem__(self, key: str, val: EnrichmentResult) -> None:
        if not self.rw:
            raise TxError("Cannot change the database in a readonly transaction!")

        raw = pickle.dumps(val)
        self.tx.put(key.encode(), raw, overwrite=True)

    def __delitem__(self, key: str) -> None:
        if not self.rw:
            raise TxError("Cannot change the database in a readonly transaction!")

        if not self.tx.delete(key.encode()):
            raise KeyError(key)

    def __contains__(self, key: str) -> bool:
        return self.tx.get(key.encode()) is not None

    def keys(self) -> list[str]:
        """Return all keys in the database."""
        cur: lmdb.Cursor = self.tx.cursor()
        return [k.decode() for k in cur.iternext(keys=True, values=False)]


class Cache:
    """Cache maps links to the articles we got from the content service.

    Keys are derived from links with key_for(). LMDB lets any number of
    readers proceed while a writer is active, and serializes writers, so the
    Cache can be shared between threads.
    """

    __slots__ = [
        "log",
        "env",
        "db",
        "path",
    ]

    log: logging.Logger
    env: lmdb.Environment
    db: 'lmdb._Database'
    path: pathlib.Path

    def __init__(self, cache_root: Union[str, pathlib.Path, None] = None) -> None:
        self.log = common.get_logger("cache")
        if cache_root is None:
            cache_root = common.path.cache
        self.path = pathlib.Path(cache_root)
        self.log.debug("Open Cache environment in %s", self.path)
        try:
            self.env = lmdb.Environment(str(self.path),
                                        subdir=True,
                                        map_size=(1 << 32),  # 4 GiB
                                        create=True,
                                        max_dbs=2,
                                        )
            self.db = self.env.open_db(db_name)
        except lmdb.Error as err:
            raise CacheError(f"Cannot open cache in {self.path}: {err}") from err

    @contextmanager
    def tx(self, rw: bool = False):
        """Perform a database transaction. Unless rw is True, no changes are permitted."""
        try:
            tx: lmdb.Transaction = self.env.begin(write=rw, db=self.db)
        except lmdb.Error as err:
            raise TxError(f"Cannot begin transaction: {err}") from err
        try:
            yield Tx(log=self.log, tx=tx, rw=rw)
        except lmdb.Error as err:
            cname: Final[str] = err.__class__.__name__
            self.log.error("Abort transaction due to %s: %s",
                           cname,
                           err)
            tx.abort()
            raise CacheError(f"{cname}: {err}") from err
        except BaseException:
            tx.abort()
            raise
        else:
            try:
                tx.commit()
            except lmdb.Error as err:
                raise TxError(f"Cannot commit transaction: {err}") from err

    def has(self, key: str) -> bool:
        """Return True if an item is stored under the given key."""
        with self.tx() as tx:
            return key in tx

    def read(self, key: str) -> Optional[EnrichmentResult]:
        """Return the item stored under the given key, or None if there is none."""
        with self.tx() as tx:
            return tx[key]

    def write(self, key: str, val: EnrichmentResult) -> None:
        """Store an item, replacing whatever was stored under the same key."""
        with self.tx(True) as tx:
            tx[key] = val

    def delete(self, key: str) -> bool:
        """Remove an item. Return False if there was nothing to remove."""
        try:
            with self.tx(True) as tx:
                del tx[key]
        except KeyError:
            return False
        return True

    def keys(self) -> Iterator[str]:
        """Iterate over the keys present when the iteration starts."""
        with self.tx() as tx:
            snapshot: list[str] = tx.keys()
        yield from snapshot

    def __len__(self) -> int:
        with self.tx() as tx:
            return tx.tx.stat(self.db)["entries"]

    def close(self) -> None:
        """Close the LMDB environment."""
        self.log.debug("Close Cache environment in %s", self.path)
        self.env.close()

# Local Variables: #
# python-indent: 4 #
# End: #

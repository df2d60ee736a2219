"""
Module: channel.py
Description: Queue contract consumed from the hosting pipeline runtime.

The runtime owns the queue and its storage-level transactions; the
sink only needs to open a transaction, take at most one event and then
commit or roll back. transaction_scope() guarantees the transaction is
begun and closed exactly once per invocation.
"""

from contextlib import contextmanager
from typing import Iterator, Optional, Protocol

from event_shipper.models.event import Event


class Transaction(Protocol):
    """Unit of work around a single take-and-process attempt."""

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def close(self) -> None: ...


class Channel(Protocol):
    """Transactional event queue supplied by the runtime."""

    def get_transaction(self) -> Transaction: ...

    def take(self) -> Optional[Event]: ...


@contextmanager
def transaction_scope(channel: Channel) -> Iterator[Transaction]:
    """
    Begin a transaction on the channel and always close it.

    Commit or rollback is left to the caller; close() runs on every
    exit path, including exceptions raised inside the block.
    """
    txn = channel.get_transaction()
    txn.begin()
    try:
        yield txn
    finally:
        txn.close()

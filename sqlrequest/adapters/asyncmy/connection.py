"""Fixed set of asyncmy connections shared by one engine."""

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

import asyncmy

from sqlrequest.exceptions import ConnectionNotOpenError
from sqlrequest.observability import ErrorChannel
from sqlrequest.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlrequest.adapters.asyncmy._types import AsyncmyConnection

__all__ = ("AsyncmyConnectionSet", "ConnectionSlot")

logger = get_logger("adapters.asyncmy")


@dataclass
class ConnectionSlot:
    """One connection together with the lock serializing work on it."""

    index: int
    connection: "AsyncmyConnection"
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    stale: bool = False

    def invalidate(self) -> None:
        """Drop a connection whose protocol or transaction state is unknown.

        The socket is closed without a round trip, so the server discards any
        open transaction. The set reconnects the slot before its next use.
        """
        if self.stale:
            return
        self.stale = True
        logger.warning("Discarding MySQL connection %d", self.index)
        try:
            self.connection.close()
        except Exception:
            logger.debug("Closing discarded MySQL connection %d failed", self.index, exc_info=True)


class AsyncmyConnectionSet:
    """Opens ``count`` connections and hands them out round-robin.

    This is not a pool: a slot is reused even while another task holds its
    lock (the caller then waits on the lock), and a connection is only
    reopened after it was invalidated.
    """

    __slots__ = ("_is_open", "_position", "_slots", "connection_config", "count", "errors")

    def __init__(
        self, connection_config: "dict[str, Any]", count: int = 1, errors: "Optional[ErrorChannel]" = None
    ) -> None:
        self.connection_config = connection_config
        self.count = max(count, 1)
        self.errors = errors if errors is not None else ErrorChannel("sqlrequest.adapters.asyncmy")
        self._slots: list[ConnectionSlot] = []
        self._position = 0
        self._is_open = False

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return f"AsyncmyConnectionSet(count={self.count}, is_open={self._is_open})"

    @property
    def is_open(self) -> bool:
        return self._is_open

    async def open(self) -> None:
        """Open every connection of the set.

        Connections opened before a failure are closed again before the error
        propagates.
        """
        if self._is_open:
            return
        try:
            for index in range(self.count):
                connection = await asyncmy.connect(**self.connection_config)
                self._slots.append(ConnectionSlot(index, connection))
        except Exception:
            await self._close_slots()
            raise
        self._is_open = True
        logger.info(
            "Opened %d MySQL connection(s)",
            len(self._slots),
            extra={"extra_fields": {"host": self.connection_config.get("host"), "count": len(self._slots)}},
        )

    def next_slot(self) -> ConnectionSlot:
        """Return the next slot in round-robin order.

        Raises:
            ConnectionNotOpenError: If the set is not open.
        """
        if not self._is_open or not self._slots:
            raise ConnectionNotOpenError
        slot = self._slots[self._position % len(self._slots)]
        self._position = (self._position + 1) % len(self._slots)
        return slot

    async def refresh(self, slot: ConnectionSlot) -> None:
        """Reconnect an invalidated slot. Call with the slot lock held."""
        if not slot.stale:
            return
        slot.connection = await asyncmy.connect(**self.connection_config)
        slot.stale = False
        logger.info("Reopened MySQL connection %d", slot.index)

    async def close(self) -> None:
        if not self._slots:
            self._is_open = False
            return
        self._is_open = False
        count = len(self._slots)
        await self._close_slots()
        logger.info("Closed %d MySQL connection(s)", count)

    async def _close_slots(self) -> None:
        slots, self._slots = self._slots, []
        for slot in slots:
            async with slot.lock:
                if slot.stale:
                    continue
                try:
                    await slot.connection.ensure_closed()
                except Exception:
                    logger.warning("Failed to close MySQL connection %d cleanly", slot.index, exc_info=True)
                    slot.connection.close()

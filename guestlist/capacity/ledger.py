"""Capacity ledger: atomic test-and-increment of bounded seat counters.

Both scheduled transport and carpools keep a "seats used" counter on the
resource row. Reservations go through a single conditional ``UPDATE ... SET
used = used + 1 WHERE used < capacity`` whose affected-row count decides the
outcome, so two callers racing for the last seat can never both win and a
loser leaves the counter untouched. The statement runs inside the caller's
session, which lets the reservation roll back together with the booking row
that depends on it.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reservation:
    """Outcome of a reservation attempt."""

    resource_id: UUID
    granted: bool


class CapacityLedger(ABC):
    @abstractmethod
    async def try_reserve(
        self,
        session: AsyncSession | None,
        resource_id: UUID,
        capacity: int | None,
        *criteria: Any,
    ) -> Reservation:
        """Take one unit of capacity if ``used < capacity``.

        A ``capacity`` of ``None`` means unlimited: the reservation is always
        granted and the counter is only kept for display. Extra ``criteria``
        are additional row conditions (e.g. "offer is still active") that must
        hold for the reservation to be granted.
        """
        raise NotImplementedError

    @abstractmethod
    async def release(self, session: AsyncSession | None, resource_id: UUID) -> None:
        """Give back one unit of capacity, never going below zero."""
        raise NotImplementedError


class SqlCapacityLedger(CapacityLedger):
    """Ledger backed by a counter column on a mapped table."""

    def __init__(self, counter: InstrumentedAttribute, key: InstrumentedAttribute) -> None:
        self._counter = counter
        self._key = key
        self._model = counter.class_

    async def try_reserve(
        self,
        session: AsyncSession,
        resource_id: UUID,
        capacity: int | None,
        *criteria: Any,
    ) -> Reservation:
        stmt = update(self._model).where(self._key == resource_id, *criteria)
        if capacity is not None:
            stmt = stmt.where(self._counter < capacity)
        stmt = stmt.values({self._counter.key: self._counter + 1}).execution_options(
            synchronize_session=False
        )

        result = await session.execute(stmt)
        granted = result.rowcount == 1
        if not granted:
            logger.info(
                "Reservation denied on %s %s (capacity=%s)",
                self._model.__tablename__,
                resource_id,
                capacity,
            )
        return Reservation(resource_id=resource_id, granted=granted)

    async def release(self, session: AsyncSession, resource_id: UUID) -> None:
        stmt = (
            update(self._model)
            .where(self._key == resource_id, self._counter > 0)
            .values({self._counter.key: self._counter - 1})
            .execution_options(synchronize_session=False)
        )
        await session.execute(stmt)

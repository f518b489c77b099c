"""
Named monotonic counters backed by the ``sequence_counters`` table.

Each allocation commits in its own transaction on its own connection, so
the value is consumed even if the caller's unit of work later rolls back.
Gaps are acceptable; handing the same value out twice is not.
"""
import structlog
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from src.application.interfaces.sequence_allocator import SequenceAllocator
from src.domain.exceptions import AllocationError
from src.infrastructure.database.models import SequenceCounterModel

logger = structlog.get_logger(__name__)


class SqlAlchemySequenceAllocator(SequenceAllocator):
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._insert = sqlite_insert if engine.dialect.name == "sqlite" else pg_insert

    def _upsert(self, key: str):  # type: ignore[no-untyped-def]
        # Concurrent callers serialize on the counter row lock taken by the upsert
        return (
            self._insert(SequenceCounterModel)
            .values(key=key, seq=1)
            .on_conflict_do_update(
                index_elements=[SequenceCounterModel.key],
                set_={"seq": SequenceCounterModel.seq + 1},
            )
            .returning(SequenceCounterModel.seq)
        )

    async def allocate(self, key: str) -> int:
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(self._upsert(key))
                value = result.scalar_one()
        except (SQLAlchemyError, OSError) as exc:
            logger.error("sequence_allocation_failed", key=key, error=str(exc))
            raise AllocationError(key, str(exc)) from exc

        logger.debug("sequence_allocated", key=key, seq=value)
        return int(value)

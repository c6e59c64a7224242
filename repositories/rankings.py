"""
Ranked Set Repository

Generation-based storage for the four ranked sets.

A rebuild writes a complete new generation, flips the pointer row and
drops older generations inside one transaction. Readers always join
through the pointer, so they see either the previous set or the new
one, never a mix.
"""
from datetime import datetime
from typing import Optional, List, Sequence

from sqlalchemy import select, update, delete, and_
from sqlalchemy.dialects.sqlite import insert

from database.models import RankedEntry, RankedSetVersion
from exceptions import GenerationConflict
from .base import BaseRepository

class RankedSetRepository(BaseRepository[RankedEntry]):
    """Repository for ranked set snapshots."""

    model = RankedEntry

    # ============================================
    # WRITES
    # ============================================

    async def replace_set(
        self,
        set_name: str,
        entries: List[dict],
        refreshed_at: datetime
    ) -> int:
        """
        Swap in a new generation of a ranked set.

        Args:
            set_name: Ranked set name
            entries: Entry column values, already in rank order
            refreshed_at: Snapshot timestamp stamped on every row

        Returns:
            The new live generation number

        Raises:
            GenerationConflict: another writer moved the pointer first
            IntegrityError: another writer already filled the new generation's slots
        """
        await self._ensure_version(set_name)
        current = await self._current_generation(set_name)
        generation = current + 1

        rows = [
            RankedEntry(
                **entry,
                set_name=set_name,
                generation=generation,
                position=position,
                last_refreshed=refreshed_at,
            )
            for position, entry in enumerate(entries, start=1)
        ]
        await self.add_all(rows)

        # Flip the pointer only if it still points where we started
        result = await self.session.execute(
            update(RankedSetVersion)
            .where(
                RankedSetVersion.set_name == set_name,
                RankedSetVersion.current_generation == current,
            )
            .values(
                current_generation=generation,
                entry_count=len(rows),
                refreshed_at=refreshed_at,
                last_error=None,
                last_error_at=None,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise GenerationConflict(set_name, current)

        await self.session.execute(
            delete(RankedEntry).where(
                RankedEntry.set_name == set_name,
                RankedEntry.generation < generation,
            )
        )
        await self.session.flush()
        return generation

    async def record_failure(self, set_name: str, error: str, failed_at: datetime) -> None:
        """Remember the last failed rebuild without touching the live generation."""
        await self._ensure_version(set_name)
        await self.session.execute(
            update(RankedSetVersion)
            .where(RankedSetVersion.set_name == set_name)
            .values(last_error=error, last_error_at=failed_at)
            .execution_options(synchronize_session=False)
        )

    async def _ensure_version(self, set_name: str) -> None:
        """Create the pointer row at generation 0 unless it already exists."""
        stmt = insert(RankedSetVersion).values(
            set_name=set_name,
            current_generation=0,
            entry_count=0,
        )
        await self.session.execute(stmt.on_conflict_do_nothing(index_elements=[RankedSetVersion.set_name]))

    async def _current_generation(self, set_name: str) -> int:
        stmt = select(RankedSetVersion.current_generation).where(RankedSetVersion.set_name == set_name)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    # ============================================
    # READS
    # ============================================

    async def get_current(
        self,
        set_name: str,
        limit: int,
        category: Optional[str] = None
    ) -> Sequence[RankedEntry]:
        """Get entries of the live generation in rank order."""
        stmt = (
            select(RankedEntry)
            .join(
                RankedSetVersion,
                and_(
                    RankedSetVersion.set_name == RankedEntry.set_name,
                    RankedSetVersion.current_generation == RankedEntry.generation,
                ),
            )
            .where(RankedEntry.set_name == set_name)
        )
        if category:
            stmt = stmt.where(RankedEntry.category == category)

        stmt = stmt.order_by(RankedEntry.position).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_versions(self) -> Sequence[RankedSetVersion]:
        """Get the pointer row of every ranked set built so far."""
        stmt = select(RankedSetVersion).order_by(RankedSetVersion.set_name)
        result = await self.session.execute(stmt)
        return result.scalars().all()

"""
Refresh Lease Repository

A named row claimed with a conditional UPDATE. The claim has to be
committed before the guarded work starts, so callers run acquire() and
release() in their own short sessions.
"""
from datetime import datetime, timedelta

from sqlalchemy import update, or_
from sqlalchemy.dialects.sqlite import insert

from database.models import RefreshLease
from .base import BaseRepository


class RefreshLeaseRepository(BaseRepository[RefreshLease]):
    """Repository for cross-process refresh leases."""

    model = RefreshLease

    async def acquire(self, name: str, holder: str, ttl: timedelta, now: datetime = None) -> bool:
        """
        Claim the lease if it is free or its previous claim has expired.

        Returns:
            True when this holder now owns the lease
        """
        now = now or self.now()
        await self.session.execute(
            insert(RefreshLease).values(name=name).on_conflict_do_nothing(index_elements=[RefreshLease.name])
        )
        result = await self.session.execute(
            update(RefreshLease)
            .where(
                RefreshLease.name == name,
                or_(RefreshLease.holder.is_(None), RefreshLease.expires_at < now),
            )
            .values(holder=holder, acquired_at=now, expires_at=now + ttl)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def release(self, name: str, holder: str) -> bool:
        """Give the lease back; a no-op if it expired and someone else took it."""
        result = await self.session.execute(
            update(RefreshLease)
            .where(RefreshLease.name == name, RefreshLease.holder == holder)
            .values(holder=None, expires_at=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

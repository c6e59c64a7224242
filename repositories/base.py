"""
Repository base for the ranking service.

Each repository wraps one AsyncSession and never commits on its own;
the caller's get_session() block owns the transaction, so everything a
repository writes inside that block lands (or rolls back) together.
"""
from datetime import datetime
from typing import TypeVar, Generic, Optional, List, Type, Any
import uuid

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from database.models.base import Base


ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Shared async operations over a single model.

    Example:
        class BusinessRepository(BaseRepository[Business]):
            model = Business
    """

    model: Type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    # ============================================
    # READS
    # ============================================

    async def get(self, entity_id: Any) -> Optional[ModelT]:
        """Look up a row by primary key; None when it does not exist."""
        return await self.session.get(self.model, entity_id)

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self.model)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    # ============================================
    # WRITES
    # ============================================

    async def add(self, entity: ModelT) -> ModelT:
        """Stage a row and flush so generated keys and defaults are populated."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def add_all(self, entities: List[ModelT]) -> List[ModelT]:
        self.session.add_all(entities)
        await self.session.flush()
        return entities

    # ============================================
    # HELPERS
    # ============================================

    @staticmethod
    def generate_id(prefix: str = "") -> str:
        """
        Sortable unique id: creation timestamp plus a random suffix.

        Args:
            prefix: Entity prefix such as "biz" or "rev"
        """
        base_id = f"{datetime.now().strftime('%Y%m%d%H%M%S')}_{uuid.uuid4().hex[:12]}"
        return f"{prefix}_{base_id}" if prefix else base_id

    @staticmethod
    def now() -> datetime:
        """Naive local time, the convention for every stored timestamp."""
        return datetime.now()

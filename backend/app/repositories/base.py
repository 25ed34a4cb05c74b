"""
Base repository with common CRUD operations.
Implements the Repository pattern for data access abstraction.
"""
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Base
from app.core.errors import RecordValidationError

ModelType = TypeVar("ModelType", bound=Base)


def require_identifier(value: Optional[str], field: str, entity: str) -> str:
    """Reject a missing or blank identifier before any write is attempted."""
    if value is None or not str(value).strip():
        raise RecordValidationError(f"{entity} is missing required {field}")
    return str(value)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository providing common database operations.

    Subclasses should set the `model` class attribute to the SQLAlchemy model.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: UUID | str) -> ModelType | None:
        """Get a single record by its primary key."""
        return await self.session.get(self.model, id)

    async def get_one_by(self, column: Any, value: Any) -> ModelType | None:
        """Get a single record where `column == value`."""
        stmt = select(self.model).where(column == value)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(
        self,
        *,
        skip: int = 0,
        limit: int = 100,
    ) -> list[ModelType]:
        """Get all records with pagination."""
        stmt = select(self.model).offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, obj_in: dict[str, Any]) -> ModelType:
        """Create a new record."""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.flush()
        await self.session.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db_obj: ModelType,
        obj_in: dict[str, Any],
        *,
        skip_none: bool = True,
    ) -> ModelType:
        """Update an existing record; None values are skipped unless told otherwise."""
        for field, value in obj_in.items():
            if value is not None or not skip_none:
                setattr(db_obj, field, value)
        await self.session.flush()
        await self.session.refresh(db_obj)
        return db_obj

    async def delete(self, db_obj: ModelType) -> None:
        """Delete a record."""
        await self.session.delete(db_obj)
        await self.session.flush()

    async def delete_where(self, *criteria: ColumnElement[bool]) -> int:
        """Bulk delete rows matching criteria; returns the number removed."""
        result = await self.session.execute(delete(self.model).where(*criteria))
        await self.session.flush()
        return result.rowcount or 0

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        """Count records, optionally filtered."""
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

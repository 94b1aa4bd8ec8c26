"""
Base repository with common tenant-scoped database operations.
"""
import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union
from uuid import uuid4

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.exceptions import PersistenceError
from fieldops.db.base import Base
from fieldops.utils.ids import IDPrefix, generate_prefixed_id

logger = logging.getLogger("fieldops.db.repositories")

# Define generic types for models
ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)


class BaseRepository(Generic[ModelType, CreateSchemaType]):
    """
    Base repository with common CRUD operations.

    Every query is restricted to one tenant; a repository never sees
    another tenant's rows.
    """

    def __init__(
        self,
        session: AsyncSession,
        model: Type[ModelType],
        tenant_id: str,
        id_prefix: Optional[IDPrefix] = None,
    ):
        """
        Initialize repository with session, model and tenant.

        Args:
            session: Database session
            model: SQLAlchemy model class
            tenant_id: Tenant whose records this repository reads and writes
            id_prefix: Prefix for generated record ids
        """
        self.session = session
        self.model = model
        self.tenant_id = tenant_id
        self.id_prefix = id_prefix

    def _new_id(self) -> str:
        if self.id_prefix is None:
            return str(uuid4())
        return generate_prefixed_id(self.id_prefix)

    def _scoped(self, *columns):
        query = select(*columns) if columns else select(self.model)
        return query.where(self.model.tenant_id == self.tenant_id)

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """
        Get a record by ID.

        Args:
            id: Record ID

        Returns:
            ModelType: Found record or None
        """
        query = self._scoped().where(self.model.id == id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list(
        self,
        *,
        filters: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[ModelType]:
        """
        Get a list of records with optional filtering.

        Args:
            filters: Optional filters as dict
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List[ModelType]: List of records
        """
        query = self._scoped()

        if filters:
            for attr_name, attr_value in filters.items():
                if hasattr(self.model, attr_name) and attr_value is not None:
                    query = query.where(getattr(self.model, attr_name) == attr_value)

        query = query.offset(skip).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create(self, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        """
        Create and commit a new record for this tenant.

        Args:
            obj_in: Data to create record with

        Returns:
            ModelType: Created record

        Raises:
            PersistenceError: If the insert fails; the session is rolled back
        """
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()

        db_obj = self.model(**obj_in_data)
        db_obj.tenant_id = self.tenant_id
        if not db_obj.id:
            db_obj.id = self._new_id()

        try:
            self.session.add(db_obj)
            await self.session.commit()
            await self.session.refresh(db_obj)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            raise PersistenceError(
                message=f"Could not save {self.model.__name__.lower()}: {e.__class__.__name__}",
                details={"model": self.model.__name__},
            )

        return db_obj

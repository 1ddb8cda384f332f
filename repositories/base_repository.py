"""
Base repository with common CRUD operations.

Provides a foundation for all domain-specific repositories.
"""

from datetime import datetime
from typing import TypeVar, Generic, Optional, Type, Any, Dict
from sqlmodel import Session, SQLModel

T = TypeVar("T", bound=SQLModel)


class BaseRepository(Generic[T]):
    """
    Generic base repository with common CRUD operations.

    Type Parameters:
        T: SQLModel entity type
    """

    def __init__(self, db_session: Session, model_class: Type[T]):
        """
        Initialize repository.

        Args:
            db_session: SQLModel database session
            model_class: The SQLModel class this repository manages
        """
        self.db = db_session
        self.model_class = model_class

    def get_by_id(self, id: Any) -> Optional[T]:
        """Get entity by primary key, or None."""
        return self.db.get(self.model_class, id)

    def create(self, entity: T) -> T:
        """
        Insert a new entity and commit.

        Args:
            entity: Entity to create

        Returns:
            Created entity, refreshed from the database
        """
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: T) -> T:
        """Persist changes made to an attached entity."""
        if hasattr(entity, "updated_at"):
            entity.updated_at = datetime.utcnow()
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update_fields(self, entity: T, changes: Dict[str, Any]) -> T:
        """
        Apply a partial update.

        Args:
            entity: Entity to modify
            changes: Mapping of attribute name to new value; unknown names are ignored

        Returns:
            Updated entity
        """
        for field, value in changes.items():
            if hasattr(entity, field):
                setattr(entity, field, value)
        return self.update(entity)

    def delete(self, entity: T) -> bool:
        self.db.delete(entity)
        self.db.commit()
        return True

    def delete_by_id(self, id: Any) -> bool:
        """
        Delete entity by ID.

        Returns:
            True if deleted, False if not found
        """
        entity = self.get_by_id(id)
        if entity:
            return self.delete(entity)
        return False

    def exists(self, id: Any) -> bool:
        return self.get_by_id(id) is not None

"""
Base repository with standardized CRUD operations and error handling.

Provides foundation for all domain repositories with type safety.
"""

from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lodging.core.exceptions import EntityAlreadyExistsError, RepositoryError, ResourceNotFoundError
from lodging.core.logging import get_logger
from lodging.models.base import BaseModel

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with standardized operations.

    Provides CRUD operations and error handling
    for all domain repositories.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Create Operations ====================

    def create(self, entity: ModelType, commit: bool = True) -> ModelType:
        """
        Create new entity.

        Args:
            entity: Entity to create
            commit: Whether to commit immediately

        Returns:
            Created entity

        Raises:
            EntityAlreadyExistsError: If a unique constraint is violated
        """
        try:
            self.db.add(entity)

            if commit:
                self.db.commit()
                self.db.refresh(entity)
            else:
                self.db.flush()

            logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
            return entity

        except IntegrityError as e:
            self.db.rollback()
            raise EntityAlreadyExistsError(
                f"{self.model.__name__} already exists",
                {"constraint_error": str(e.orig)},
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Create failed: {str(e)}") from e

    def add(self, entity: ModelType) -> ModelType:
        """Stage an entity in the current unit of work without flushing."""
        self.db.add(entity)
        return entity

    # ==================== Read Operations ====================

    def find_by_id(self, id: str) -> Optional[ModelType]:
        """
        Find entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity or None
        """
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by ID failed: {str(e)}") from e

    def get_by_id(self, id: str) -> ModelType:
        """
        Get entity by ID or raise exception.

        Raises:
            ResourceNotFoundError: If entity not found
        """
        entity = self.find_by_id(id)
        if not entity:
            raise ResourceNotFoundError(self.model.__name__, str(id))
        return entity

    # ==================== Delete Operations ====================

    def delete(self, entity: ModelType, commit: bool = True) -> None:
        """Hard delete entity."""
        try:
            self.db.delete(entity)
            if commit:
                self.db.commit()
            else:
                self.db.flush()
            logger.debug(f"Deleted {self.model.__name__} with id: {entity.id}")
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Delete failed: {str(e)}") from e

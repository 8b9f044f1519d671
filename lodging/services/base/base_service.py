"""
Base service class providing common functionality for all services.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Any, Dict, Generic, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lodging.core.clock import Clock, system_clock
from lodging.core.exceptions import BaseAppException, ErrorCode
from lodging.core.logging import get_logger
from lodging.repositories.base.base_repository import BaseRepository
from lodging.services.base.service_result import ErrorSeverity, ServiceError, ServiceResult

TModel = TypeVar("TModel")
TRepo = TypeVar("TRepo", bound=BaseRepository)


class BaseService(ABC, Generic[TModel, TRepo]):
    """
    Base service with common behaviors:
    - Shared logger, db session and injected clock
    - Consistent error handling via ServiceResult
    - Transaction management utilities
    """

    def __init__(self, repository: TRepo, db_session: Session, clock: Clock = system_clock):
        """
        Initialize base service.

        Args:
            repository: Repository instance for data access
            db_session: SQLAlchemy database session
            clock: Source of the current time
        """
        self.repository: TRepo = repository
        self.db: Session = db_session
        self.clock: Clock = clock
        self._logger = get_logger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Convert exception to a ServiceResult failure with logging.

        Domain exceptions are expected rejections and are logged at WARNING
        with their own code and message; anything else is logged with the
        traceback and reported as an internal error.
        """
        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }
        if additional_context:
            context.update(additional_context)

        if isinstance(exception, BaseAppException):
            self._logger.warning(f"{operation} rejected: {exception.message}", extra=context)
            return ServiceResult.failure(ServiceError.from_app_exception(exception))

        self._logger.error(f"Error during {operation}: {exception}", exc_info=True, extra=context)

        code = ErrorCode.DATABASE_ERROR if isinstance(exception, SQLAlchemyError) else ErrorCode.INTERNAL_ERROR
        return ServiceResult.failure(
            ServiceError(
                code=code,
                message=f"Failed to {operation}",
                severity=ErrorSeverity.CRITICAL,
                details={
                    "error": str(exception),
                    "entity_ref": str(entity_ref) if entity_ref is not None else None,
                },
                status_code=500,
            )
        )

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self, auto_commit: bool = True):
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction():
                self.repository.add(entity)
                # automatic commit on success, rollback on exception
        """
        try:
            yield self.db
            if auto_commit:
                self._commit()
        except Exception:
            self._rollback()
            raise

    def _commit(self) -> None:
        """Commit the current transaction with error handling."""
        try:
            self.db.commit()
            self._logger.debug("Transaction committed successfully")
        except Exception as e:
            self._logger.debug(f"Commit failed: {e}")
            self._rollback()
            raise

    def _rollback(self) -> None:
        """Rollback the current transaction, suppressing rollback errors."""
        try:
            self.db.rollback()
            self._logger.debug("Transaction rolled back")
        except SQLAlchemyError as e:
            # Rollback errors must not mask the original error
            self._logger.warning(f"Rollback failed: {e}")

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def _log_operation(
        self,
        operation: str,
        entity_ref: Optional[Any] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log service operation with standardized format."""
        context = {"operation": operation, "entity_ref": str(entity_ref) if entity_ref else None}
        if extra:
            context.update(extra)

        self._logger.info(f"Operation: {operation}", extra=context)

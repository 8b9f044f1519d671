from lodging.services.base.base_service import BaseService
from lodging.services.base.service_result import ErrorSeverity, ServiceError, ServiceResult

__all__ = ["BaseService", "ErrorSeverity", "ServiceError", "ServiceResult"]

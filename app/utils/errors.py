"""
Error taxonomy for tenant resolution and tenant-scoped storage
"""

from enum import Enum
from typing import Any, Optional


class ErrorType(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFIGURATION = "configuration"
    STORAGE = "storage"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TenantStoreError(Exception):
    """Base class for every error raised by the storage core"""

    error_type = ErrorType.STORAGE
    severity = ErrorSeverity.HIGH
    error_code = "STORE_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class TenantFormatError(TenantStoreError):
    """Identifier does not satisfy the slug rules"""

    error_type = ErrorType.VALIDATION
    severity = ErrorSeverity.LOW
    error_code = "TENANT_INVALID_FORMAT"
    status_code = 400


class TenantNotFoundError(TenantStoreError):
    """Tenant is absent from the registry or flagged inactive"""

    error_type = ErrorType.NOT_FOUND
    severity = ErrorSeverity.MEDIUM
    error_code = "TENANT_NOT_FOUND"
    status_code = 404

    def __init__(self, tenant_id: str, details: Any = None):
        super().__init__(f"Tenant '{tenant_id}' not found or inactive", details)
        self.tenant_id = tenant_id


class ConfigurationError(TenantStoreError):
    """Tenant configuration exists but cannot be used"""

    error_type = ErrorType.CONFIGURATION
    severity = ErrorSeverity.HIGH
    error_code = "TENANT_CONFIG_INVALID"
    status_code = 500


class MissingConfigFieldsError(ConfigurationError):
    error_code = "TENANT_CONFIG_MISSING_FIELDS"

    def __init__(self, missing: list, tenant_id: Optional[str] = None):
        super().__init__(
            f"invalid configuration: missing required fields ({', '.join(missing)})",
            details={"tenant": tenant_id, "missing": missing},
        )
        self.missing = missing


class ConfigurationFormatError(ConfigurationError):
    error_code = "TENANT_CONFIG_FORMAT"

    def __init__(self, cause: str, tenant_id: Optional[str] = None):
        super().__init__(f"invalid configuration format: {cause}", details={"tenant": tenant_id})


class StorageError(TenantStoreError):
    """Filesystem or database unavailable; the caller may retry"""

    error_type = ErrorType.STORAGE
    severity = ErrorSeverity.HIGH
    error_code = "STORAGE_ERROR"
    status_code = 503


class RecordNotFoundError(TenantStoreError):
    error_type = ErrorType.NOT_FOUND
    severity = ErrorSeverity.LOW
    error_code = "RECORD_NOT_FOUND"
    status_code = 404

    def __init__(self, record_id: Any, tenant_id: Any = None):
        super().__init__(f"record not found: '{record_id}'", details={"tenant": tenant_id, "id": record_id})
        self.record_id = record_id


class MissingRequiredFieldsError(TenantStoreError):
    error_type = ErrorType.VALIDATION
    severity = ErrorSeverity.LOW
    error_code = "RECORD_MISSING_FIELDS"
    status_code = 400

    def __init__(self, missing: list):
        super().__init__(f"missing required fields: {', '.join(missing)}", details={"missing": missing})
        self.missing = missing

from .core_service import CoreService
from .errors import ConfigError, ErrorKind, ServiceError, UploadError
from .models import ExtractionResult, ExtractionStatus, Transaction

__all__ = [
    "CoreService",
    "ConfigError",
    "ErrorKind",
    "ExtractionResult",
    "ExtractionStatus",
    "ServiceError",
    "Transaction",
    "UploadError",
]

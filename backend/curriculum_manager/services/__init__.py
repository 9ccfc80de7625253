"""Curriculum Manager - Services initialization."""
from curriculum_manager.services.api_client import ApiError, CurriculumApiClient
from curriculum_manager.services.csv_import import CsvFormatError
from curriculum_manager.services.local_store import (
    LocalCurriculumStore,
    StorageError,
    StorageQuotaExceededError,
)
from curriculum_manager.services.remote_store import RemoteCurriculumStore

__all__ = [
    "ApiError",
    "CurriculumApiClient",
    "CsvFormatError",
    "LocalCurriculumStore",
    "RemoteCurriculumStore",
    "StorageError",
    "StorageQuotaExceededError",
]

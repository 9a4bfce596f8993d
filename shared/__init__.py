"""
POSTURECOACH Shared Module

Common utilities used across all services.
"""

from .storage import UploadStore, UploadRejected, get_upload_store

__all__ = [
    'UploadStore',
    'UploadRejected',
    'get_upload_store',
]

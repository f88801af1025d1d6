"""Storefront components wired into the Flask app."""

from .auth_provider import CurrentUser, SessionAuthProvider
from .upload_service import StoredUpload, UploadService

__all__ = [
    "CurrentUser",
    "SessionAuthProvider",
    "StoredUpload",
    "UploadService",
]

"""
Blob Storage Domain

Interface to the external object store and signed retrieval handles.
"""

from .blob_storage import IBlobStorage, RetrievalHandle
from .signed_url_service import SignedUrlService

__all__ = ["IBlobStorage", "RetrievalHandle", "SignedUrlService"]

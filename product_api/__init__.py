"""
Async client for the hstockplus product catalog admin API.
"""

from .client import DEFAULT_BASE_URL, ProductApi
from .errors import FailureKind, ProductApiError, ValidationError
from .http_utils import RequestSpec, ResultEnvelope, execute, mask_api_key
from .models import ImageUpload, ProductInput, ProductQuery, Subproduct, image_to_data_url

__all__ = [
    "DEFAULT_BASE_URL",
    "ProductApi",
    "FailureKind",
    "ProductApiError",
    "ValidationError",
    "RequestSpec",
    "ResultEnvelope",
    "execute",
    "mask_api_key",
    "ImageUpload",
    "ProductInput",
    "ProductQuery",
    "Subproduct",
    "image_to_data_url",
]

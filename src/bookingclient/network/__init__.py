"""
Network access to the booking platform.

All requests go through ``ApiGateway``; the service classes only map
methods onto routes.
"""

from .gateway import ApiGateway, extract_error_message
from .sequencing import LatestOnly, StaleResponse
from .services import AuthApi, BookingApi, CatalogApi, ProviderRequestApi

__all__ = [
    "ApiGateway",
    "extract_error_message",
    "LatestOnly",
    "StaleResponse",
    "AuthApi",
    "BookingApi",
    "CatalogApi",
    "ProviderRequestApi",
]

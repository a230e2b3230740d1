from .api_client import BackendClient, Page, RequestCredentials
from .exceptions import ApiError, AuthenticationError, BackendUnavailable

__all__ = [
    'BackendClient', 'Page', 'RequestCredentials',
    'ApiError', 'AuthenticationError', 'BackendUnavailable',
]

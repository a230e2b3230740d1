class ApiError(Exception):
    """A non-2xx answer from the billing backend."""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


class AuthenticationError(ApiError):
    """401/403 from the backend: the caller has to log in again."""
    pass


class BackendUnavailable(ApiError):
    pass

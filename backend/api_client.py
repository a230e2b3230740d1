import hashlib
import logging

import requests

from backend.exceptions import ApiError, AuthenticationError, BackendUnavailable

logger = logging.getLogger(__name__)

AUTH_STATUS_CODES = (401, 403)


class RequestCredentials:
    """Headers-to-be for one console request.

    Tenant calls carry a bearer token and, optionally, the tenant id;
    super-admin calls carry only the admin key.
    """

    def __init__(self, token=None, tenant_id=None, admin_key=None, verified=False):
        self.token = token
        self.tenant_id = tenant_id
        self.admin_key = admin_key
        # True once the token signature was checked locally
        self.verified = verified

    @property
    def tenant_key(self):
        """Key for per-tenant snapshots and draft ownership.

        An unverified token only shares state with requests carrying the same
        token, so a forged tenant claim never reaches data the backend served
        to somebody else.
        """
        tenant = self.tenant_id or "default"
        if self.token and not self.verified:
            digest = hashlib.sha256(self.token.encode("utf-8")).hexdigest()
            return f"{tenant}:{digest}"
        return tenant

    def headers(self):
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.tenant_id:
            headers["X-Tenant-Id"] = self.tenant_id
        if self.admin_key:
            headers["x-admin-key"] = self.admin_key
        return headers


class Page:
    """One normalized list response.

    The backend answers list endpoints either with a bare array or with an
    envelope such as ``{"invoices": [...], "totalPages": 3}``; both decode to
    this shape.
    """

    def __init__(self, items=None, total_pages=1, page=1, total=0):
        self.items = items if items is not None else []
        self.total_pages = total_pages
        self.page = page
        self.total = total

    @classmethod
    def from_response(cls, body, key=None):
        if isinstance(body, list):
            return cls(items=body, total_pages=1, page=1, total=len(body))

        if not isinstance(body, dict):
            raise ApiError("Unexpected list response from backend", payload={"body": body})

        items = None
        for candidate in (key, "items", "data", "results"):
            if candidate and isinstance(body.get(candidate), list):
                items = body[candidate]
                break
        if items is None:
            raise ApiError("Unexpected list response from backend", payload=body)

        return cls(
            items=items,
            total_pages=int(body.get("totalPages") or 1),
            page=int(body.get("currentPage") or body.get("page") or 1),
            total=int(body.get("total") or body.get("totalCount") or len(items)),
        )

    def to_dict(self):
        return {
            "items": self.items,
            "totalPages": self.total_pages,
            "page": self.page,
            "total": self.total,
        }


def _error_message(response, fallback):
    try:
        body = response.json()
    except ValueError:
        return fallback, {}
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or fallback, body
    return fallback, {}


class BackendClient:
    """Thin JSON client for the external billing REST API."""

    def __init__(self, base_url=None, timeout=15, session=None):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def init_app(self, app):
        self.base_url = app.config["BACKEND_API_URL"].rstrip("/")
        self.timeout = app.config.get("BACKEND_TIMEOUT", self.timeout)
        app.extensions["backend_client"] = self

    def url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method, path, credentials=None, json=None, params=None, fallback_message=None, raw=False):
        """Send one request; returns decoded JSON (or the raw response when ``raw``).

        Any non-2xx answer raises ``ApiError`` with the body's ``message``;
        401/403 raise ``AuthenticationError``. Nothing is retried.
        """
        credentials = credentials or RequestCredentials()
        fallback_message = fallback_message or f"Request to {path} failed"
        try:
            response = self.session.request(
                method,
                self.url(path),
                headers=credentials.headers(),
                json=json,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.error("Backend timeout on %s %s: %s", method, path, e)
            raise BackendUnavailable("Backend did not respond in time", status_code=None) from e
        except requests.exceptions.RequestException as e:
            logger.error("Backend unreachable on %s %s: %s", method, path, e)
            raise BackendUnavailable("Could not connect to the billing backend", status_code=None) from e

        if not 200 <= response.status_code < 300:
            message, payload = _error_message(response, fallback_message)
            logger.warning("Backend %s %s -> %s: %s", method, path, response.status_code, message)
            error_cls = AuthenticationError if response.status_code in AUTH_STATUS_CODES else ApiError
            raise error_cls(message, status_code=response.status_code, payload=payload)

        if raw:
            return response
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ApiError("Backend returned a non-JSON response", status_code=response.status_code) from e

    def get(self, path, credentials=None, params=None, fallback_message=None):
        return self.request("GET", path, credentials, params=params, fallback_message=fallback_message)

    def post(self, path, credentials=None, json=None, fallback_message=None):
        return self.request("POST", path, credentials, json=json, fallback_message=fallback_message)

    def put(self, path, credentials=None, json=None, fallback_message=None):
        return self.request("PUT", path, credentials, json=json, fallback_message=fallback_message)

    def patch(self, path, credentials=None, json=None, fallback_message=None):
        return self.request("PATCH", path, credentials, json=json or {}, fallback_message=fallback_message)

    def delete(self, path, credentials=None, params=None, fallback_message=None):
        return self.request("DELETE", path, credentials, params=params, fallback_message=fallback_message)

    def get_page(self, path, credentials=None, params=None, key=None, fallback_message=None):
        body = self.get(path, credentials, params=params, fallback_message=fallback_message)
        return Page.from_response(body, key=key)

    def download(self, path, credentials=None, params=None, fallback_message=None):
        response = self.request("GET", path, credentials, params=params, fallback_message=fallback_message, raw=True)
        return response.content

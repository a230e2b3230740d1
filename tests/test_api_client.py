from unittest.mock import MagicMock

import pytest
import requests

from backend.api_client import BackendClient, Page, RequestCredentials
from backend.exceptions import ApiError, AuthenticationError, BackendUnavailable
from tests.fakes import make_response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def api(session):
    return BackendClient("http://backend.test/api/", timeout=3, session=session)


class TestPage:
    def test_bare_array(self):
        page = Page.from_response([{"id": 1}, {"id": 2}])

        assert page.items == [{"id": 1}, {"id": 2}]
        assert (page.total_pages, page.page, page.total) == (1, 1, 2)

    def test_named_envelope(self):
        page = Page.from_response(
            {"invoices": [{"id": 1}], "totalPages": 3, "currentPage": 2, "total": 21},
            key="invoices",
        )

        assert page.items == [{"id": 1}]
        assert (page.total_pages, page.page, page.total) == (3, 2, 21)

    def test_generic_envelope(self):
        page = Page.from_response({"data": [{"id": 1}]}, key="products")

        assert page.items == [{"id": 1}]
        assert page.to_dict() == {"items": [{"id": 1}], "totalPages": 1, "page": 1, "total": 1}

    @pytest.mark.parametrize("body", [{"message": "ok"}, "text", None])
    def test_unexpected_shape(self, body):
        with pytest.raises(ApiError):
            Page.from_response(body, key="invoices")


class TestRequestCredentials:
    def test_tenant_headers(self):
        headers = RequestCredentials(token="abc", tenant_id="t1").headers()

        assert headers["Authorization"] == "Bearer abc"
        assert headers["X-Tenant-Id"] == "t1"
        assert "x-admin-key" not in headers

    def test_admin_headers(self):
        credentials = RequestCredentials(admin_key="k")

        assert credentials.headers()["x-admin-key"] == "k"
        assert "Authorization" not in credentials.headers()
        assert credentials.tenant_key == "default"


class TestBackendClient:
    def test_get_sends_credentials_and_timeout(self, api, session):
        session.request.return_value = make_response(200, {"ok": True})

        result = api.get("/invoices/stats", RequestCredentials(token="abc", tenant_id="t1"))

        assert result == {"ok": True}
        args, kwargs = session.request.call_args
        assert args == ("GET", "http://backend.test/api/invoices/stats")
        assert kwargs["headers"]["Authorization"] == "Bearer abc"
        assert kwargs["timeout"] == 3

    def test_error_uses_backend_message(self, api, session):
        session.request.return_value = make_response(400, {"message": "Insufficient stock for Widget"})

        with pytest.raises(ApiError) as exc_info:
            api.post("/invoices", json={})

        assert exc_info.value.message == "Insufficient stock for Widget"
        assert exc_info.value.status_code == 400

    def test_error_without_body_uses_fallback(self, api, session):
        session.request.return_value = make_response(500, b"<html>oops</html>")

        with pytest.raises(ApiError) as exc_info:
            api.delete("/invoices/1", fallback_message="Error deleting invoice")

        assert exc_info.value.message == "Error deleting invoice"

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_failures(self, api, session, status):
        session.request.return_value = make_response(status, {"message": "Token expired"})

        with pytest.raises(AuthenticationError):
            api.get("/products")
        assert session.request.call_count == 1

    def test_connection_error(self, api, session):
        session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(BackendUnavailable):
            api.get("/products")

    def test_timeout(self, api, session):
        session.request.side_effect = requests.exceptions.Timeout()

        with pytest.raises(BackendUnavailable, match="in time"):
            api.get("/products")

    def test_empty_success_body(self, api, session):
        session.request.return_value = make_response(204)

        assert api.delete("/invoices/1") == {}

    def test_patch_sends_empty_object(self, api, session):
        session.request.return_value = make_response(200, {"restored": True})

        api.patch("/invoices/1/restore")

        assert session.request.call_args.kwargs["json"] == {}

    def test_download_returns_bytes(self, api, session):
        session.request.return_value = make_response(200, b"a,b\n1,2\n")

        assert api.download("/invoices/export") == b"a,b\n1,2\n"

    def test_get_page(self, api, session):
        session.request.return_value = make_response(200, [{"_id": "c1"}])

        page = api.get_page("/customers", key="customers")

        assert page.items == [{"_id": "c1"}]

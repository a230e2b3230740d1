from unittest.mock import MagicMock

import pytest

from backend.api_client import Page, RequestCredentials
from backend.exceptions import ApiError
from superadmin.organization import Organization, Tenant, normalize_slug, toggled
from superadmin.tenant_directory import DirectoryError, TenantDirectory

ORGS = [
    {"_id": "o1", "name": "Acme", "ownerEmail": "owner@acme.test", "planType": "organization", "status": "active"},
    {"_id": "o2", "name": "Solo", "ownerEmail": "solo@test", "status": "inactive"},
]
DELETED_ORGS = [
    {"_id": "o3", "name": "Gone", "ownerEmail": "gone@test", "isDeleted": True, "deletedAt": "2024-05-01T00:00:00Z"},
]
TENANTS = [
    {"_id": "t1", "name": "Main", "slug": "main", "organizationId": {"_id": "o1", "name": "Acme"}},
]


@pytest.fixture
def api():
    api = MagicMock()
    api.get_page.return_value = Page(items=list(ORGS))
    return api


@pytest.fixture
def directory(api):
    return TenantDirectory(api, RequestCredentials(admin_key="k"))


class TestOrganizations:
    def test_list(self, directory, api):
        organizations = directory.list_organizations()

        assert [o.name for o in organizations] == ["Acme", "Solo"]
        assert organizations[0].plan_type == "organization"
        assert organizations[1].plan_type == "self"
        assert api.get_page.call_args.kwargs["params"] is None

    def test_list_deleted(self, directory, api):
        api.get_page.return_value = Page(items=list(DELETED_ORGS))

        organizations = directory.list_organizations(deleted=True)

        assert organizations[0].is_deleted is True
        assert api.get_page.call_args.kwargs["params"] == {"isDeleted": "true"}

    def test_create_refetches(self, directory, api):
        api.post.return_value = {"_id": "o9"}

        created = directory.create_organization({"name": "New", "ownerEmail": "n@test", "planType": "self"})

        assert created == {"_id": "o9"}
        assert api.post.call_args.args[0] == "/super-admin/organizations"
        assert api.get_page.call_count == 1
        assert len(directory.organizations) == 2

    def test_invalid_plan_type_is_refused_locally(self, directory, api):
        with pytest.raises(DirectoryError):
            directory.create_organization({"name": "New", "planType": "enterprise"})
        api.post.assert_not_called()

    def test_toggle_status(self, directory, api):
        directory.toggle_organization_status("o1", "inactive")

        assert api.patch.call_args.args[0] == "/super-admin/organizations/o1/status"
        assert api.patch.call_args.kwargs["json"] == {"status": "inactive"}

    def test_toggle_without_status_flips_snapshot_value(self, directory, api):
        directory.list_organizations()

        directory.toggle_organization_status("o2")

        assert api.patch.call_args.kwargs["json"] == {"status": "active"}

    def test_toggle_without_status_needs_a_loaded_record(self, directory, api):
        with pytest.raises(DirectoryError, match="not loaded"):
            directory.toggle_organization_status("o1")
        api.patch.assert_not_called()

    def test_invalid_status_is_refused_locally(self, directory, api):
        with pytest.raises(DirectoryError, match="Invalid status"):
            directory.toggle_organization_status("o1", "paused")
        api.patch.assert_not_called()

    def test_soft_and_hard_delete(self, directory, api):
        directory.delete_organization("o1")
        assert api.delete.call_args.kwargs.get("params") is None

        directory.hard_delete_organization("o1")
        assert api.delete.call_args.kwargs["params"] == {"permanent": "true"}
        assert api.get_page.call_count == 2

    def test_restore_refused_when_not_deleted(self, directory, api):
        directory.list_organizations()

        with pytest.raises(DirectoryError, match="not deleted"):
            directory.restore_organization("o1")
        api.patch.assert_not_called()

    def test_restore_deleted(self, directory, api):
        api.get_page.return_value = Page(items=list(DELETED_ORGS))
        directory.list_organizations(deleted=True)

        directory.restore_organization("o3")

        assert api.patch.call_args.args[0] == "/super-admin/organizations/o3/restore"
        # the refresh keeps the trash filter
        assert api.get_page.call_args.kwargs["params"] == {"isDeleted": "true"}

    def test_backend_error_leaves_snapshot(self, directory, api):
        directory.list_organizations()
        api.put.side_effect = ApiError("Organization not found", status_code=404)

        with pytest.raises(ApiError, match="Organization not found"):
            directory.update_organization("o1", {"name": "Renamed"})

        assert [o.name for o in directory.organizations] == ["Acme", "Solo"]
        assert api.get_page.call_count == 1

    def test_reports(self, directory, api):
        api.get.return_value = {"totalSales": 10}

        assert directory.aggregated_stats("o1") == {"totalSales": 10}
        directory.branch_dashboard("o1", "main")
        assert api.get.call_args.args[0] == "/super-admin/organizations/o1/branches/main/dashboard"

    def test_verify(self, directory, api):
        assert directory.verify() is True
        assert api.post.call_args.args[0] == "/super-admin/verify"


class TestTenants:
    def test_list_populated_organization(self, directory, api):
        api.get_page.return_value = Page(items=list(TENANTS))

        tenants = directory.list_tenants(organization_id="o1")

        assert tenants[0].organization_ref == "o1"
        assert api.get_page.call_args.kwargs["params"] == {"organizationId": "o1"}

    def test_create_requires_fields(self, directory, api):
        with pytest.raises(DirectoryError) as exc_info:
            directory.create_tenant({"organizationId": "o1", "name": "Branch"})

        assert "slug" in str(exc_info.value)
        assert "adminPassword" in str(exc_info.value)
        api.post.assert_not_called()

    def test_create_normalizes_slug(self, directory, api):
        directory.create_tenant({
            "organizationId": "o1", "name": "Branch", "slug": "  North-Side ",
            "adminEmail": "a@test", "adminPassword": "secret",
        })

        assert api.post.call_args.kwargs["json"]["slug"] == "north-side"

    def test_bad_slug(self, directory, api):
        with pytest.raises(ValueError):
            directory.create_tenant({
                "organizationId": "o1", "name": "Branch", "slug": "north side",
                "adminEmail": "a@test", "adminPassword": "secret",
            })
        api.post.assert_not_called()

    def test_create_for_unknown_organization(self, directory, api):
        directory.list_organizations()

        with pytest.raises(DirectoryError, match="does not exist"):
            directory.create_tenant({
                "organizationId": "o404", "name": "Branch", "slug": "branch",
                "adminEmail": "a@test", "adminPassword": "secret",
            })
        api.post.assert_not_called()

    def test_mutations_refetch_with_last_filter(self, directory, api):
        api.get_page.return_value = Page(items=list(TENANTS))
        directory.list_tenants(organization_id="o1")

        directory.toggle_tenant_status("t1", "inactive")
        directory.delete_tenant("t1")

        assert api.get_page.call_count == 3
        assert api.get_page.call_args.kwargs["params"] == {"organizationId": "o1"}

    def test_duplicate_slug_message_is_surfaced(self, directory, api):
        api.post.side_effect = ApiError("Tenant slug 'main' is already taken.", status_code=400)

        with pytest.raises(ApiError) as exc_info:
            directory.create_tenant({
                "organizationId": "o1", "name": "Main", "slug": "main",
                "adminEmail": "a@test", "adminPassword": "secret",
            })

        assert exc_info.value.message == "Tenant slug 'main' is already taken."


class TestRecords:
    def test_normalize_slug(self):
        assert normalize_slug(" Main-Branch ") == "main-branch"
        for bad in ("", "a--b", "-a", "a_b"):
            with pytest.raises(ValueError):
                normalize_slug(bad)

    def test_toggled(self):
        assert toggled("active") == "inactive"
        assert toggled("inactive") == "active"

    def test_round_trip_keys(self):
        organization = Organization.from_api(ORGS[0])
        tenant = Tenant.from_api({"id": "t2", "organizationId": "o1", "name": "B", "slug": "b"})

        assert organization.to_dict()["ownerEmail"] == "owner@acme.test"
        assert tenant.to_dict()["organizationId"] == "o1"
        assert tenant.is_deleted is False

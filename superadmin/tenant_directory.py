import logging

from superadmin.organization import (
    PLAN_TYPES,
    STATUSES,
    Organization,
    Tenant,
    normalize_slug,
    toggled,
)

logger = logging.getLogger(__name__)

BASE = "/super-admin"
TENANT_REQUIRED_FIELDS = ("organizationId", "name", "slug", "adminEmail", "adminPassword")


class DirectoryError(ValueError):
    """Refused locally, before any call to the admin API."""
    pass


class TenantDirectory:
    """Super-admin view of organizations and their tenants (branches).

    Every mutation is a single admin API call followed by a re-fetch of the
    affected list, so ``organizations``/``tenants`` always reflect the last
    successful fetch. Errors from the API propagate unchanged (``ApiError``
    with the server's ``message``).
    """

    def __init__(self, client, credentials):
        self.client = client
        self.credentials = credentials
        self.organizations = None
        self.tenants = None
        self._org_filter = {"deleted": False}
        self._tenant_filter = {"organization_id": None, "deleted": False}

    # -- snapshot helpers -------------------------------------------------

    def _find(self, collection, record_id):
        for record in collection or []:
            if record.id == str(record_id):
                return record
        return None

    def _check_status(self, status):
        if status not in STATUSES:
            raise DirectoryError(f"Invalid status '{status}'. Use one of: {', '.join(STATUSES)}.")

    def _next_status(self, collection, record_id, status, label):
        """``status`` as given, or the opposite of the snapshot's current one."""
        if status is None:
            record = self._find(collection, record_id)
            if record is None:
                raise DirectoryError(f"{label} {record_id} is not loaded; pass a status explicitly.")
            return toggled(record.status)
        self._check_status(status)
        return status

    def _check_restorable(self, collection, record_id, label):
        record = self._find(collection, record_id)
        if record is not None and not record.is_deleted:
            raise DirectoryError(f"{label} '{record.name}' is not deleted.")

    def verify(self):
        self.client.post(f"{BASE}/verify", self.credentials, fallback_message="Invalid Password")
        return True

    # -- organizations ----------------------------------------------------

    def list_organizations(self, deleted=False):
        self._org_filter = {"deleted": deleted}
        params = {"isDeleted": "true"} if deleted else None
        page = self.client.get_page(f"{BASE}/organizations", self.credentials, params=params,
                                    key="organizations", fallback_message="Failed to fetch organizations")
        self.organizations = [Organization.from_api(item) for item in page.items]
        return self.organizations

    def _refresh_organizations(self):
        return self.list_organizations(**self._org_filter)

    def create_organization(self, data):
        data = dict(data or {})
        plan_type = data.get("planType")
        if plan_type is not None and plan_type not in PLAN_TYPES:
            raise DirectoryError(f"Invalid plan type '{plan_type}'. Use one of: {', '.join(PLAN_TYPES)}.")
        status = data.get("status")
        if status is not None:
            self._check_status(status)
        created = self.client.post(f"{BASE}/organizations", self.credentials, json=data,
                                   fallback_message="Failed to create organization")
        logger.info("Organization created: %s", data.get("name"))
        self._refresh_organizations()
        return created

    def update_organization(self, org_id, data):
        data = dict(data or {})
        if data.get("status") is not None:
            self._check_status(data["status"])
        updated = self.client.put(f"{BASE}/organizations/{org_id}", self.credentials, json=data,
                                  fallback_message="Failed to update organization")
        self._refresh_organizations()
        return updated

    def toggle_organization_status(self, org_id, status=None):
        status = self._next_status(self.organizations, org_id, status, "Organization")
        updated = self.client.patch(f"{BASE}/organizations/{org_id}/status", self.credentials,
                                    json={"status": status}, fallback_message="Failed to update status")
        logger.info("Organization %s set to %s", org_id, status)
        self._refresh_organizations()
        return updated

    def delete_organization(self, org_id):
        """Soft delete. Tenants of the organization are left untouched."""
        result = self.client.delete(f"{BASE}/organizations/{org_id}", self.credentials,
                                    fallback_message="Failed to delete organization")
        logger.info("Organization %s moved to trash", org_id)
        self._refresh_organizations()
        return result

    def restore_organization(self, org_id):
        self._check_restorable(self.organizations, org_id, "Organization")
        result = self.client.patch(f"{BASE}/organizations/{org_id}/restore", self.credentials,
                                   fallback_message="Failed to restore organization")
        self._refresh_organizations()
        return result

    def hard_delete_organization(self, org_id):
        result = self.client.delete(f"{BASE}/organizations/{org_id}", self.credentials,
                                    params={"permanent": "true"},
                                    fallback_message="Failed to delete organization")
        logger.warning("Organization %s permanently deleted", org_id)
        self._refresh_organizations()
        return result

    # -- tenants ----------------------------------------------------------

    def list_tenants(self, organization_id=None, deleted=False):
        self._tenant_filter = {"organization_id": organization_id, "deleted": deleted}
        params = {}
        if organization_id:
            params["organizationId"] = organization_id
        if deleted:
            params["isDeleted"] = "true"
        page = self.client.get_page(f"{BASE}/tenants", self.credentials, params=params or None,
                                    key="tenants", fallback_message="Failed to fetch tenants")
        self.tenants = [Tenant.from_api(item) for item in page.items]
        return self.tenants

    def _refresh_tenants(self):
        return self.list_tenants(**self._tenant_filter)

    def create_tenant(self, data):
        """Provision a branch; the backend also creates its data store and first admin."""
        data = dict(data or {})
        missing = [name for name in TENANT_REQUIRED_FIELDS if not data.get(name)]
        if missing:
            raise DirectoryError(f"Missing required fields: {', '.join(missing)}.")
        data["slug"] = normalize_slug(data["slug"])
        if data.get("status") is not None:
            self._check_status(data["status"])
        if self.organizations is not None and self._find(self.organizations, data["organizationId"]) is None:
            raise DirectoryError(f"Organization {data['organizationId']} does not exist.")

        created = self.client.post(f"{BASE}/tenants", self.credentials, json=data,
                                   fallback_message="Failed to create tenant")
        logger.info("Tenant provisioned: %s", data["slug"])
        self._refresh_tenants()
        return created

    def update_tenant(self, tenant_id, data):
        data = dict(data or {})
        if data.get("slug"):
            data["slug"] = normalize_slug(data["slug"])
        if data.get("status") is not None:
            self._check_status(data["status"])
        updated = self.client.put(f"{BASE}/tenants/{tenant_id}", self.credentials, json=data,
                                  fallback_message="Failed to update branch")
        self._refresh_tenants()
        return updated

    def toggle_tenant_status(self, tenant_id, status=None):
        status = self._next_status(self.tenants, tenant_id, status, "Branch")
        updated = self.client.patch(f"{BASE}/tenants/{tenant_id}/status", self.credentials,
                                    json={"status": status}, fallback_message="Failed to update branch status")
        logger.info("Tenant %s set to %s", tenant_id, status)
        self._refresh_tenants()
        return updated

    def delete_tenant(self, tenant_id):
        result = self.client.delete(f"{BASE}/tenants/{tenant_id}", self.credentials,
                                    fallback_message="Failed to delete branch")
        logger.info("Tenant %s moved to trash", tenant_id)
        self._refresh_tenants()
        return result

    def restore_tenant(self, tenant_id):
        self._check_restorable(self.tenants, tenant_id, "Branch")
        result = self.client.patch(f"{BASE}/tenants/{tenant_id}/restore", self.credentials,
                                   fallback_message="Failed to restore branch")
        self._refresh_tenants()
        return result

    def hard_delete_tenant(self, tenant_id):
        result = self.client.delete(f"{BASE}/tenants/{tenant_id}", self.credentials,
                                    params={"permanent": "true"}, fallback_message="Failed to delete branch")
        logger.warning("Tenant %s permanently deleted", tenant_id)
        self._refresh_tenants()
        return result

    # -- reports ----------------------------------------------------------

    def aggregated_stats(self, org_id):
        return self.client.get(f"{BASE}/organizations/{org_id}/aggregated-stats", self.credentials,
                               fallback_message="Failed to fetch stats")

    def branch_dashboard(self, org_id, slug):
        return self.client.get(f"{BASE}/organizations/{org_id}/branches/{slug}/dashboard", self.credentials,
                               fallback_message="Failed to fetch branch details")

ACTIONS = ("LOGIN", "LOGOUT", "CREATE", "UPDATE", "DELETE", "SOFT_DELETE", "RESTORE", "OTHER")
MODULES = ("AUTH", "PRODUCT", "INVOICE", "STAFF_LOG", "SUPPORT", "BRANCH", "ORGANIZATION", "CUSTOMER",
           "SETTINGS", "OTHER")


class ActivityLog:
    """One staff action recorded by the backend (who did what, to which record)."""

    def __init__(self, id, action, module, description="", performed_by=None, target_id=None,
                 organization_id=None, tenant_id=None, tenant_name=None, metadata=None, timestamp=None):
        self.id = id
        self.action = action
        self.module = module
        self.description = description
        self.performed_by = performed_by or {}
        self.target_id = target_id
        self.organization_id = organization_id
        self.tenant_id = tenant_id
        self.tenant_name = tenant_name
        self.metadata = metadata or {}
        self.timestamp = timestamp

    @classmethod
    def from_api(cls, data):
        performed_by = data.get("performedBy") or {}
        return cls(
            id=str(data.get("_id") or data.get("id") or ""),
            action=data.get("action") or "OTHER",
            module=data.get("module") or "OTHER",
            description=data.get("description") or "",
            performed_by={
                "userId": performed_by.get("userId"),
                "name": performed_by.get("name") or "",
                "email": performed_by.get("email") or "",
                "role": performed_by.get("role") or "",
            },
            target_id=data.get("targetId"),
            organization_id=data.get("organizationId"),
            tenant_id=data.get("tenantId"),
            # merged super-admin listings tag each entry with its branch
            tenant_name=data.get("tenantName") or data.get("branchName"),
            metadata=data.get("metadata") or {},
            timestamp=data.get("timestamp"),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "action": self.action,
            "module": self.module,
            "description": self.description,
            "performedBy": self.performed_by,
            "targetId": self.target_id,
            "organizationId": self.organization_id,
            "tenantId": self.tenant_id,
            "tenantName": self.tenant_name,
            "metadata": self.metadata,
            "timestamp": self.timestamp,
        }

    def __repr__(self):
        return f"<ActivityLog {self.module}.{self.action} {self.id}>"

import re

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE)

PLAN_SELF = "self"                  # single branch
PLAN_ORGANIZATION = "organization"  # multi branch panel
PLAN_TYPES = (PLAN_SELF, PLAN_ORGANIZATION)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def normalize_slug(slug):
    """Lowercase and trim; raises when the result is not URL-safe."""
    slug = (slug or "").strip().lower()
    if not SLUG_PATTERN.match(slug):
        raise ValueError(
            f"Slug '{slug}' must contain only lowercase letters, digits and single hyphens."
        )
    return slug


def _record_id(data):
    return str(data.get("_id") or data.get("id") or "")


class Organization:
    def __init__(self, id, name, owner_email, plan_type=PLAN_SELF, status=STATUS_ACTIVE,
                 is_deleted=False, deleted_at=None, created_at=None):
        self.id = id
        self.name = name
        self.owner_email = owner_email
        self.plan_type = plan_type
        self.status = status
        self.is_deleted = is_deleted
        self.deleted_at = deleted_at
        self.created_at = created_at

    @classmethod
    def from_api(cls, data):
        return cls(
            id=_record_id(data),
            name=data.get("name") or "",
            owner_email=data.get("ownerEmail") or "",
            plan_type=data.get("planType") or PLAN_SELF,
            status=data.get("status") or STATUS_ACTIVE,
            is_deleted=bool(data.get("isDeleted")),
            deleted_at=data.get("deletedAt"),
            created_at=data.get("createdAt"),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "ownerEmail": self.owner_email,
            "planType": self.plan_type,
            "status": self.status,
            "isDeleted": self.is_deleted,
            "deletedAt": self.deleted_at,
            "createdAt": self.created_at,
        }


class Tenant:
    """A branch: one isolated data store owned by an organization."""

    def __init__(self, id, organization_ref, name, slug, status=STATUS_ACTIVE,
                 is_deleted=False, deleted_at=None, created_at=None):
        self.id = id
        self.organization_ref = organization_ref
        self.name = name
        self.slug = slug
        self.status = status
        self.is_deleted = is_deleted
        self.deleted_at = deleted_at
        self.created_at = created_at

    @classmethod
    def from_api(cls, data):
        organization = data.get("organizationId")
        # populated references arrive as objects
        if isinstance(organization, dict):
            organization = organization.get("_id") or organization.get("id")
        return cls(
            id=_record_id(data),
            organization_ref=str(organization) if organization else None,
            name=data.get("name") or "",
            slug=data.get("slug") or "",
            status=data.get("status") or STATUS_ACTIVE,
            is_deleted=bool(data.get("isDeleted")),
            deleted_at=data.get("deletedAt"),
            created_at=data.get("createdAt"),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "organizationId": self.organization_ref,
            "name": self.name,
            "slug": self.slug,
            "status": self.status,
            "isDeleted": self.is_deleted,
            "deletedAt": self.deleted_at,
            "createdAt": self.created_at,
        }


def toggled(status):
    return STATUS_INACTIVE if status == STATUS_ACTIVE else STATUS_ACTIVE

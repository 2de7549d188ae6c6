"""Editor roles and the permissions they grant."""

from __future__ import annotations

from dataclasses import dataclass, field

# Bypasses every permission check
ADMINISTRATOR = "administrator"
MANAGE_USERS = "manage-users"
MANAGE_LOCKS = "manage-locks"
EDIT_SPECIES = "edit-species"
EDIT_PROTECTED_AREAS = "edit-protected-areas"
EDIT_NEWS = "edit-news"

DEFAULT_ROLE = "user"


@dataclass
class RoleDefinition:
    """Definition of a role with its permissions."""

    name: str
    permissions: set[str] = field(default_factory=set)
    display_name: str | None = None
    description: str | None = None


def create_role(
    name: str,
    *permissions: str,
    display_name: str | None = None,
    description: str | None = None,
) -> RoleDefinition:
    """Create a role definition with the given permissions.

    Args:
        name: The unique identifier for the role
        *permissions: Permission strings granted by this role
        display_name: Human-readable name for the role
        description: Description of the role's purpose

    Returns:
        A RoleDefinition instance
    """
    return RoleDefinition(
        name=name,
        permissions=set(permissions),
        display_name=display_name or name.replace("_", " ").title(),
        description=description,
    )


ADMIN = create_role(
    "admin",
    ADMINISTRATOR,
    MANAGE_USERS,
    MANAGE_LOCKS,
    EDIT_SPECIES,
    EDIT_PROTECTED_AREAS,
    EDIT_NEWS,
    display_name="Administrator",
    description="Full access, including user management",
)

CONTENT_EDITOR = create_role(
    "content_editor",
    EDIT_SPECIES,
    EDIT_PROTECTED_AREAS,
    EDIT_NEWS,
    display_name="Content Editor",
    description="Can edit and publish every content kind",
)

NEWS_EDITOR = create_role(
    "news_editor",
    EDIT_NEWS,
    display_name="News Editor",
    description="Can edit and publish news",
)

AREAS_EDITOR = create_role(
    "areas_editor",
    EDIT_PROTECTED_AREAS,
    display_name="Protected Areas Editor",
    description="Can edit and publish protected areas",
)

SPECIES_EDITOR = create_role(
    "species_editor",
    EDIT_SPECIES,
    display_name="Species Editor",
    description="Can edit and publish species",
)

USER = create_role(
    DEFAULT_ROLE,
    display_name="User",
    description="Public site account without editing rights",
)

ROLE_DEFINITIONS: dict[str, RoleDefinition] = {
    role.name: role
    for role in [ADMIN, CONTENT_EDITOR, NEWS_EDITOR, AREAS_EDITOR, SPECIES_EDITOR, USER]
}


def get_role_definition(name: str) -> RoleDefinition | None:
    """Get a role definition by name."""
    return ROLE_DEFINITIONS.get(name)


def is_valid_role(name: str) -> bool:
    return name in ROLE_DEFINITIONS


def get_permissions(role: str | None) -> set[str]:
    definition = get_role_definition(role) if role else None
    return set(definition.permissions) if definition else set()


def has_permission(role: str | None, permission: str) -> bool:
    """Check whether a role grants a permission.

    Roles holding ``administrator`` pass every check. Unknown roles grant
    nothing.
    """
    permissions = get_permissions(role)
    return ADMINISTRATOR in permissions or permission in permissions

"""
Static role registry.

Maps role name to permission templates. Definitions are loaded once at
process start and only read afterwards; register_role() is for startup
wiring, before the first evaluation builds the cached rule sets.

Unknown roles expand to no permissions (deny by default).
"""

from .models import PermissionTemplate as P, RoleDefinition

ROLES = ("guest", "user", "developer", "admin")

_role_definitions: dict[str, RoleDefinition] = {
    "guest": RoleDefinition(
        name="guest",
        description="Anonymous visitor",
        permissions=(
            P("read", "Public"),
        ),
    ),
    "user": RoleDefinition(
        name="user",
        description="Signed-in member of an organization",
        permissions=(
            P("read", "Dashboard"),
            P("read", "Profile", fields={"ssn": "none"}),
            P("update", "Profile", conditions={"userId": "${user.id}"}),
            P("delete", "Profile", inverted=True),
        ),
        inherits=("guest",),
    ),
    "developer": RoleDefinition(
        name="developer",
        description="Builds and operates plugins",
        permissions=(
            P("read", "User"),
            P("update", "Profile"),
            P("create", "Plugin"),
        ),
        inherits=("user",),
    ),
    "admin": RoleDefinition(
        name="admin",
        description="Full access",
        permissions=(
            P("manage", "all"),
        ),
    ),
}


def register_role(definition: RoleDefinition) -> None:
    """Register a new role definition or replace an existing one."""
    _role_definitions[definition.name] = definition


def get_role(name: str | None) -> RoleDefinition | None:
    """Get role definition by name."""
    if not name:
        return None
    return _role_definitions.get(name)


def list_roles() -> list[str]:
    """List all registered role names."""
    return list(_role_definitions.keys())


def get_permissions_for_role(name: str | None) -> list[P]:
    """
    Get all templates for a role, including inherited ones.

    Own templates come first, then each inherited role's templates
    depth-first in declaration order. Each role contributes once, so
    inheritance cycles terminate. Unknown roles return [].
    """
    permissions: list[P] = []
    _collect(name, permissions, set())
    return permissions


def _collect(name: str | None, permissions: list[P], seen: set[str]) -> None:
    definition = get_role(name)
    if definition is None or definition.name in seen:
        return
    seen.add(definition.name)

    permissions.extend(definition.permissions)
    for parent in definition.inherits:
        _collect(parent, permissions, seen)

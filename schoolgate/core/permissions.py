"""
Default role → module → permission matrix.

This is the seed for the ``role_permissions`` table; the permission guard
reads the table, not this dict, so operators can adjust grants at runtime.
"""

from __future__ import annotations

from schoolgate.core.enums import ModuleName, Permission, Role

ALL_CRUD = frozenset(Permission)
READ_ONLY = frozenset({Permission.READ})

# Operational modules a school admin fully manages.
_SCHOOL_ADMIN_MODULES = (
    ModuleName.STUDENT_MANAGEMENT,
    ModuleName.TEACHER_MANAGEMENT,
    ModuleName.CLASS_MANAGEMENT,
    ModuleName.ACADEMICS_MANAGEMENT,
    ModuleName.ATTENDANCE_MANAGEMENT,
    ModuleName.EVENT_MANAGEMENT,
)

DEFAULT_ROLE_PERMISSIONS: dict[Role, dict[ModuleName, frozenset[Permission]]] = {
    Role.SUPER_ADMIN: {module: ALL_CRUD for module in ModuleName},
    Role.SCHOOL_ADMIN: {
        **{module: ALL_CRUD for module in _SCHOOL_ADMIN_MODULES},
        ModuleName.AUDIT_SYSTEM: READ_ONLY,
    },
    Role.TEACHER: {
        ModuleName.STUDENT_MANAGEMENT: READ_ONLY,
        ModuleName.ACADEMICS_MANAGEMENT: READ_ONLY,
        ModuleName.ATTENDANCE_MANAGEMENT: frozenset(
            {Permission.CREATE, Permission.READ, Permission.UPDATE}
        ),
        ModuleName.EVENT_MANAGEMENT: READ_ONLY,
    },
    Role.STUDENT: {
        ModuleName.ACADEMICS_MANAGEMENT: READ_ONLY,
        ModuleName.ATTENDANCE_MANAGEMENT: READ_ONLY,
        ModuleName.EVENT_MANAGEMENT: READ_ONLY,
    },
    Role.PARENT: {
        ModuleName.STUDENT_MANAGEMENT: READ_ONLY,
        ModuleName.ATTENDANCE_MANAGEMENT: READ_ONLY,
        ModuleName.EVENT_MANAGEMENT: READ_ONLY,
    },
}


def iter_grants(
    matrix: dict[Role, dict[ModuleName, frozenset[Permission]]] = DEFAULT_ROLE_PERMISSIONS,
):
    """Yield ``(role, module, permission)`` for every grant in *matrix*."""
    for role, modules in matrix.items():
        for module, permissions in modules.items():
            for permission in sorted(permissions, key=lambda p: p.value):
                yield role, module, permission


def is_granted_by_default(role: str, module: str, permission: str) -> bool:
    try:
        grants = DEFAULT_ROLE_PERMISSIONS.get(Role(role), {})
        return Permission(permission) in grants.get(ModuleName(module), frozenset())
    except ValueError:
        return False

# app/core/permissions.py
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Role(str, Enum):
    """
    Permission tier of a member within a workspace.
    """

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class Permission(str, Enum):
    CREATE_WORKSPACE = "CREATE_WORKSPACE"
    EDIT_WORKSPACE = "EDIT_WORKSPACE"
    DELETE_WORKSPACE = "DELETE_WORKSPACE"
    MANAGE_WORKSPACE_SETTINGS = "MANAGE_WORKSPACE_SETTINGS"

    ADD_MEMBER = "ADD_MEMBER"
    CHANGE_MEMBER_ROLE = "CHANGE_MEMBER_ROLE"
    REMOVE_MEMBER = "REMOVE_MEMBER"

    CREATE_PROJECT = "CREATE_PROJECT"
    EDIT_PROJECT = "EDIT_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"

    CREATE_TASK = "CREATE_TASK"
    EDIT_TASK = "EDIT_TASK"
    DELETE_TASK = "DELETE_TASK"

    CREATE_EVENT = "CREATE_EVENT"
    EDIT_EVENT = "EDIT_EVENT"
    DELETE_EVENT = "DELETE_EVENT"

    VIEW_ONLY = "VIEW_ONLY"


# Static role -> permission table. Read-only once the module is imported.
ROLE_PERMISSIONS: Mapping[Role, frozenset[Permission]] = MappingProxyType(
    {
        Role.OWNER: frozenset(Permission),
        Role.ADMIN: frozenset(
            {
                Permission.ADD_MEMBER,
                Permission.CREATE_PROJECT,
                Permission.EDIT_PROJECT,
                Permission.DELETE_PROJECT,
                Permission.CREATE_TASK,
                Permission.EDIT_TASK,
                Permission.DELETE_TASK,
                Permission.CREATE_EVENT,
                Permission.EDIT_EVENT,
                Permission.DELETE_EVENT,
                Permission.MANAGE_WORKSPACE_SETTINGS,
                Permission.VIEW_ONLY,
            }
        ),
        Role.MEMBER: frozenset(
            {
                Permission.VIEW_ONLY,
                Permission.CREATE_TASK,
                Permission.EDIT_TASK,
                Permission.CREATE_EVENT,
                Permission.EDIT_EVENT,
            }
        ),
    }
)

"""Tests for role definitions and permission checks."""

import pytest

from wildtrip.auth.roles import (
    ADMINISTRATOR,
    EDIT_NEWS,
    EDIT_PROTECTED_AREAS,
    EDIT_SPECIES,
    MANAGE_LOCKS,
    MANAGE_USERS,
    ROLE_DEFINITIONS,
    create_role,
    get_role_definition,
    has_permission,
)
from wildtrip.db.content_kinds import CONTENT_KINDS


class TestRoles:
    def test_create_role(self):
        role = create_role("reviewer", "edit-news", description="Reviews news")

        assert role.permissions == {"edit-news"}
        assert role.display_name == "Reviewer"

    def test_all_roles_registered(self):
        assert set(ROLE_DEFINITIONS) == {
            "admin",
            "content_editor",
            "news_editor",
            "areas_editor",
            "species_editor",
            "user",
        }

    def test_admin_has_administrator(self):
        assert ADMINISTRATOR in get_role_definition("admin").permissions

    def test_every_kind_permission_is_granted_somewhere(self):
        granted = set().union(*(role.permissions for role in ROLE_DEFINITIONS.values()))
        for kind in CONTENT_KINDS.values():
            assert kind.permission in granted


class TestHasPermission:
    @pytest.mark.parametrize(
        "role, permission, expected",
        [
            ("admin", "anything-at-all", True),
            ("content_editor", EDIT_SPECIES, True),
            ("content_editor", EDIT_NEWS, True),
            ("content_editor", MANAGE_USERS, False),
            ("content_editor", MANAGE_LOCKS, False),
            ("news_editor", EDIT_NEWS, True),
            ("news_editor", EDIT_SPECIES, False),
            ("areas_editor", EDIT_PROTECTED_AREAS, True),
            ("species_editor", EDIT_SPECIES, True),
            ("species_editor", EDIT_PROTECTED_AREAS, False),
            ("user", EDIT_NEWS, False),
            ("unknown", EDIT_NEWS, False),
            (None, EDIT_NEWS, False),
        ],
    )
    def test_matrix(self, role, permission, expected):
        assert has_permission(role, permission) is expected

"""Dictionary projections of content records.

Three views exist: the editor view (published fields plus draft and lock
state), the preview view (published fields overlaid with the pending draft)
and the public view (published fields only, images flattened to URLs).
"""

from __future__ import annotations

import copy
from typing import Any

from pydantic.alias_generators import to_camel

from wildtrip.db.content_kinds import ContentKind, main_image_url

LIFECYCLE_FIELDS = ("id", "slug", "status", "published_at", "created_at", "updated_at", "version")
DRAFT_FIELDS = ("draft_data", "has_draft", "draft_created_at")
LOCK_FIELDS = ("locked_by", "locked_at", "lock_expires_at")


def overlay_draft(kind: ContentKind, record: Any) -> dict[str, Any]:
    """Published editable fields overridden by every key present in the draft.

    Keys are tested for presence, not truthiness: a draft value of ``None``
    replaces the published value.
    """
    values = {name: getattr(record, name) for name in sorted(kind.editable_fields)}
    draft = record.draft_data
    if draft is not None:
        for key in draft.keys():
            if key in kind.editable_fields:
                values[key] = copy.deepcopy(draft[key])
    return values


def editor_dict(kind: ContentKind, record: Any) -> dict[str, Any]:
    data = {name: getattr(record, name) for name in LIFECYCLE_FIELDS}
    data.update({name: getattr(record, name) for name in sorted(kind.editable_fields)})
    data.update({name: getattr(record, name) for name in DRAFT_FIELDS})
    data.update({name: getattr(record, name) for name in LOCK_FIELDS})
    return data


def preview_dict(kind: ContentKind, record: Any) -> dict[str, Any]:
    data = editor_dict(kind, record)
    data.update(overlay_draft(kind, record))
    data["is_draft"] = bool(record.has_draft)
    return data


def public_dict(kind: ContentKind, record: Any) -> dict[str, Any]:
    """Published projection; never includes draft or lock state."""
    data = {name: getattr(record, name) for name in kind.public_fields}
    data["main_image_url"] = main_image_url(record)
    if kind.public_extras is not None:
        data.update(kind.public_extras(record))
    return data


def to_wire(data: dict[str, Any]) -> dict[str, Any]:
    """camelCase the top-level keys; nested JSON content is left untouched."""
    return {to_camel(key): value for key, value in data.items()}


def patch_from_wire(kind: ContentKind, payload: dict[str, Any]) -> dict[str, Any]:
    """Map camelCase request keys back to attribute names.

    Keys that match no editable field are kept verbatim so validation can
    report them.
    """
    by_camel = {to_camel(name): name for name in kind.editable_fields}
    patch = {}
    for key in payload.keys():
        patch[by_camel.get(key, key)] = payload[key]
    return patch


USER_FIELDS = (
    "id",
    "external_id",
    "email",
    "username",
    "full_name",
    "avatar_url",
    "bio",
    "is_active",
    "role",
    "created_at",
    "updated_at",
)


def user_dict(user: Any) -> dict[str, Any]:
    return {name: getattr(user, name) for name in USER_FIELDS}

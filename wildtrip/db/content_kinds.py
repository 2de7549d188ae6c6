"""Descriptors for the editable content kinds.

A single set of services implements listing, drafts, publishing and locking
for every kind; what differs between species, protected areas and news is
captured here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from wildtrip.db.models import News, ProtectedArea, Species
from wildtrip.lib.exceptions import NotFoundError

SEO_FIELDS = ("seo_title", "seo_description", "seo_keywords")

MAIN_GROUPS = (
    "mammal",
    "bird",
    "reptile",
    "amphibian",
    "fish",
    "insect",
    "arachnid",
    "crustacean",
    "mollusk",
    "plant",
    "fungus",
    "algae",
    "other",
)

CONSERVATION_STATUSES = (
    "extinct",
    "extinct_in_wild",
    "critically_endangered",
    "endangered",
    "vulnerable",
    "near_threatened",
    "least_concern",
    "data_deficient",
    "not_evaluated",
)

PROTECTED_AREA_TYPES = (
    "national_park",
    "national_reserve",
    "natural_monument",
    "nature_sanctuary",
)

CHILEAN_REGIONS = (
    "arica_y_parinacota",
    "tarapaca",
    "antofagasta",
    "atacama",
    "coquimbo",
    "valparaiso",
    "metropolitana",
    "ohiggins",
    "maule",
    "nuble",
    "biobio",
    "araucania",
    "los_rios",
    "los_lagos",
    "aysen",
    "magallanes",
)

NEWS_CATEGORIES = ("conservation", "research", "education", "current_events")

# Facet value the public site sends to mean "no filter"
FACET_WILDCARD = "all"


def _image_url(image: Any) -> str | None:
    if isinstance(image, dict):
        return image.get("url")
    return None


def _gallery_urls(images: Any) -> list[str] | None:
    if not images:
        return None
    return [img["url"] for img in images if isinstance(img, dict) and img.get("url")]


def _species_extras(record: Species) -> dict[str, Any]:
    return {"images": _gallery_urls(record.gallery_images)}


def _protected_area_extras(record: ProtectedArea) -> dict[str, Any]:
    return {
        "images": _gallery_urls(record.gallery_images),
        "surface": str(record.area) if record.area is not None else None,
    }


@dataclass(frozen=True)
class ContentKind:
    """Everything the generic services need to know about one content kind."""

    name: str
    path: str
    label: str
    model: type
    editable_fields: frozenset[str]
    required_fields: frozenset[str]
    structured_fields: frozenset[str]
    search_fields: tuple[str, ...]
    facets: dict[str, tuple[str, ...]]
    # Public facet name -> model attribute, when they differ
    facet_columns: dict[str, str] = field(default_factory=dict)
    sort_fields: dict[str, str] = field(default_factory=dict)
    default_limit: int = 20
    permission: str = ""
    public_fields: tuple[str, ...] = ()
    public_extras: Callable[[Any], dict[str, Any]] | None = None

    def column(self, attribute: str):
        return getattr(self.model, attribute)

    def facet_column(self, facet: str):
        return self.column(self.facet_columns.get(facet, facet))

    def valid_facet_value(self, facet: str, value: Any) -> bool:
        allowed = self.facets.get(facet)
        return allowed is not None and value in allowed


SPECIES = ContentKind(
    name="species",
    path="species",
    label="Species",
    model=Species,
    editable_fields=frozenset({
        "common_name",
        "scientific_name",
        "kingdom",
        "phylum",
        "class_name",
        "order_name",
        "family",
        "main_group",
        "specific_category",
        "conservation_status",
        "habitat",
        "distribution",
        "description",
        "distinctive_features",
        "rich_content",
        "references",
        "main_image",
        "gallery_images",
        *SEO_FIELDS,
    }),
    required_fields=frozenset({"common_name", "scientific_name"}),
    structured_fields=frozenset({"rich_content", "references", "main_image", "gallery_images"}),
    search_fields=("common_name", "scientific_name"),
    facets={"main_group": MAIN_GROUPS, "conservation_status": CONSERVATION_STATUSES},
    sort_fields={
        "commonName": "common_name",
        "publishedAt": "published_at",
        "createdAt": "created_at",
    },
    default_limit=20,
    permission="edit-species",
    public_fields=(
        "id",
        "slug",
        "status",
        "common_name",
        "scientific_name",
        "kingdom",
        "phylum",
        "class_name",
        "order_name",
        "family",
        "main_group",
        "specific_category",
        "conservation_status",
        "habitat",
        "distribution",
        "description",
        "distinctive_features",
        "rich_content",
        "references",
        *SEO_FIELDS,
        "published_at",
    ),
    public_extras=_species_extras,
)

PROTECTED_AREA = ContentKind(
    name="protected_area",
    path="protected-areas",
    label="Protected area",
    model=ProtectedArea,
    editable_fields=frozenset({
        "name",
        "area_type",
        "region",
        "location",
        "area",
        "creation_year",
        "description",
        "ecosystems",
        "key_species",
        "visitor_information",
        "rich_content",
        "main_image",
        "gallery_images",
        *SEO_FIELDS,
    }),
    required_fields=frozenset({"name"}),
    structured_fields=frozenset({
        "location",
        "ecosystems",
        "key_species",
        "visitor_information",
        "rich_content",
        "main_image",
        "gallery_images",
    }),
    search_fields=("name",),
    facets={"type": PROTECTED_AREA_TYPES, "region": CHILEAN_REGIONS},
    facet_columns={"type": "area_type"},
    sort_fields={
        "name": "name",
        "publishedAt": "published_at",
        "createdAt": "created_at",
    },
    default_limit=20,
    permission="edit-protected-areas",
    public_fields=(
        "id",
        "slug",
        "status",
        "name",
        "area_type",
        "region",
        "location",
        "area",
        "creation_year",
        "description",
        "ecosystems",
        "key_species",
        "visitor_information",
        "rich_content",
        *SEO_FIELDS,
        "published_at",
    ),
    public_extras=_protected_area_extras,
)

NEWS = ContentKind(
    name="news",
    path="news",
    label="News",
    model=News,
    editable_fields=frozenset({
        "title",
        "author",
        "category",
        "summary",
        "content",
        "tags",
        "main_image",
        *SEO_FIELDS,
    }),
    required_fields=frozenset({"title"}),
    structured_fields=frozenset({"content", "tags", "main_image"}),
    search_fields=("title", "summary"),
    facets={"category": NEWS_CATEGORIES},
    sort_fields={
        "title": "title",
        "publishedAt": "published_at",
        "createdAt": "created_at",
    },
    default_limit=10,
    permission="edit-news",
    public_fields=(
        "id",
        "slug",
        "status",
        "title",
        "author",
        "category",
        "summary",
        "content",
        "tags",
        *SEO_FIELDS,
        "published_at",
    ),
)

CONTENT_KINDS: dict[str, ContentKind] = {kind.name: kind for kind in (SPECIES, PROTECTED_AREA, NEWS)}


def get_content_kind(name: str) -> ContentKind:
    try:
        return CONTENT_KINDS[name]
    except KeyError:
        raise NotFoundError(f"Unknown content kind '{name}'") from None


def get_content_kind_by_path(path: str) -> ContentKind:
    for kind in CONTENT_KINDS.values():
        if kind.path == path:
            return kind
    raise NotFoundError(f"Unknown content kind '{path}'")


def main_image_url(record: Any) -> str | None:
    """Flatten a structured main image reference to its URL."""
    return _image_url(getattr(record, "main_image", None))

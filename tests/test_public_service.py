"""Tests for the published-only read API."""

from datetime import datetime, timedelta, UTC
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from wildtrip.db.content_kinds import NEWS, PROTECTED_AREA, SPECIES
from wildtrip.db.services import draft_service, public_service

IMAGE = {"id": 1, "url": "https://cdn.example.org/main.jpg"}
GALLERY = [
    {"id": 2, "url": "https://cdn.example.org/a.jpg", "galleryId": 1},
    {"id": 3, "url": "https://cdn.example.org/b.jpg", "galleryId": 1},
]


def _broken_session():
    session = AsyncMock()
    session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))
    return session


class TestPublicProjection:
    """What the public site sees."""

    @pytest.mark.asyncio
    async def test_only_published_records_are_listed(self, db_session, make_species):
        await make_species(slug="puma")
        await make_species(slug="pending", status="draft")

        page = await public_service.find_published(db_session, SPECIES, {"status": "draft"})

        assert [item["slug"] for item in page.data] == ["puma"]
        assert page.pagination.total == 1

    @pytest.mark.asyncio
    async def test_draft_values_are_never_exposed(self, db_session, make_species):
        puma = await make_species()
        await draft_service.create_draft(db_session, SPECIES, puma.id, {"common_name": "Cougar"})

        item = await public_service.find_by_slug(db_session, SPECIES, "puma")

        assert item["common_name"] == "Puma"
        assert "draft_data" not in item
        assert "has_draft" not in item
        assert "locked_by" not in item

    @pytest.mark.asyncio
    async def test_images_are_flattened(self, db_session, make_species):
        await make_species(main_image=IMAGE, gallery_images=GALLERY)

        item = await public_service.find_by_slug(db_session, SPECIES, "puma")

        assert item["main_image_url"] == IMAGE["url"]
        assert item["images"] == [img["url"] for img in GALLERY]
        assert "main_image" not in item

    @pytest.mark.asyncio
    async def test_protected_area_surface(self, db_session, make_area):
        area = await make_area(area=181414)

        item = await public_service.find_by_id(db_session, PROTECTED_AREA, area.id)

        assert item["surface"] == "181414"
        assert item["images"] is None

    @pytest.mark.asyncio
    async def test_unpublished_lookup_returns_none(self, db_session, make_news):
        news = await make_news(status="draft")

        assert await public_service.find_by_id(db_session, NEWS, news.id) is None
        assert await public_service.find_by_slug(db_session, NEWS, news.slug) is None
        assert await public_service.find_by_slug(db_session, NEWS, "missing") is None

    @pytest.mark.asyncio
    async def test_last_published_orders_by_publication(self, db_session, make_news):
        for i in range(4):
            news = await make_news(slug=f"story-{i}", status="draft")
            await draft_service.publish(
                db_session, NEWS, news.id, now=datetime(2026, 1, 1, tzinfo=UTC) + timedelta(days=i)
            )

        latest = await public_service.get_last_published(db_session, NEWS)

        assert [item["slug"] for item in latest] == ["story-3", "story-2", "story-1"]

    @pytest.mark.asyncio
    async def test_total_published(self, db_session, make_news):
        await make_news(slug="one")
        await make_news(slug="two")
        await make_news(slug="three", status="draft")

        assert await public_service.get_total_published(db_session, NEWS) == 2


class TestDegradation:
    """Storage failures never reach the public site."""

    @pytest.mark.asyncio
    async def test_listing_degrades_to_empty_page(self):
        page = await public_service.find_published(_broken_session(), SPECIES, {"page": "2"})

        assert page.data == []
        assert page.pagination.to_dict() == {"page": 2, "pageSize": 20, "total": 0, "totalPages": 0}

    @pytest.mark.asyncio
    async def test_lookups_degrade_to_none(self):
        assert await public_service.find_by_slug(_broken_session(), SPECIES, "puma") is None
        assert await public_service.find_by_id(_broken_session(), SPECIES, 1) is None

    @pytest.mark.asyncio
    async def test_latest_and_total_degrade(self):
        assert await public_service.get_last_published(_broken_session(), NEWS) == []
        assert await public_service.get_total_published(_broken_session(), NEWS) == 0

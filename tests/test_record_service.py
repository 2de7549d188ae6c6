"""Tests for direct record creation, updates, archiving and deletion."""

import pytest

from wildtrip.db.content_kinds import NEWS, SPECIES
from wildtrip.db.services import query_service, record_service
from wildtrip.lib.exceptions import NotFoundError, ValidationError, VersionConflictError


class TestValidateSlug:
    @pytest.mark.parametrize("slug", ["puma", "torres-del-paine", "news-2026"])
    def test_valid(self, slug):
        assert record_service.validate_slug(slug) == slug

    @pytest.mark.parametrize("slug", ["", "Puma", "two words", "trailing-", "-leading", "a--b"])
    def test_invalid(self, slug):
        with pytest.raises(ValidationError):
            record_service.validate_slug(slug)


class TestCreateRecord:
    @pytest.mark.asyncio
    async def test_create_draft_record(self, db_session):
        record = await record_service.create_record(
            db_session, NEWS, "new-reserve", {"title": "A new reserve", "tags": ["parks"]}
        )

        assert record.id is not None
        assert record.status == "draft"
        assert record.published_at is None
        assert record.has_draft is False
        assert record.version == 1
        assert record.tags == ["parks"]

    @pytest.mark.asyncio
    async def test_create_published_record_sets_published_at(self, db_session, make_species):
        record = await make_species(status="published")

        assert record.status == "published"
        assert record.published_at is not None

    @pytest.mark.asyncio
    async def test_missing_required_field(self, db_session):
        with pytest.raises(ValidationError):
            await record_service.create_record(db_session, SPECIES, "puma", {"common_name": "Puma"})

    @pytest.mark.asyncio
    async def test_cannot_create_archived(self, db_session):
        with pytest.raises(ValidationError):
            await record_service.create_record(
                db_session, NEWS, "old", {"title": "Old"}, status="archived"
            )

    @pytest.mark.asyncio
    async def test_duplicate_slug(self, db_session, make_species):
        await make_species(slug="puma")

        with pytest.raises(ValidationError, match="already in use"):
            await make_species(slug="puma")


class TestUpdateRecord:
    @pytest.mark.asyncio
    async def test_update_fields_and_slug(self, db_session, make_species):
        puma = await make_species()

        record = await record_service.update_record(
            db_session, SPECIES, puma.id, {"habitat": "Andes"}, slug="puma-concolor"
        )

        assert record.slug == "puma-concolor"
        assert record.habitat == "Andes"
        assert record.version == 2

    @pytest.mark.asyncio
    async def test_update_checks_version(self, db_session, make_species):
        puma = await make_species()

        with pytest.raises(VersionConflictError):
            await record_service.update_record(
                db_session, SPECIES, puma.id, {"habitat": "Andes"}, expected_version=5
            )

    @pytest.mark.asyncio
    async def test_slug_conflict_on_update(self, db_session, make_species):
        await make_species(slug="puma")
        huemul = await make_species(slug="huemul", common_name="Huemul")

        with pytest.raises(ValidationError):
            await record_service.update_record(db_session, SPECIES, huemul.id, {}, slug="puma")


class TestArchiveAndDelete:
    @pytest.mark.asyncio
    async def test_archive_hides_from_published(self, db_session, make_species):
        puma = await make_species()

        record = await record_service.archive_record(db_session, SPECIES, puma.id)

        assert record.status == "archived"
        assert await query_service.find_by_id(db_session, SPECIES, puma.id, published_only=True) is None

    @pytest.mark.asyncio
    async def test_delete(self, db_session, make_species):
        puma = await make_species()

        await record_service.delete_record(db_session, SPECIES, puma.id)

        with pytest.raises(NotFoundError):
            await record_service.delete_record(db_session, SPECIES, puma.id)

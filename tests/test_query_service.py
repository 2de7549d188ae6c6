"""Tests for listing, filtering and pagination of content records."""

import math

import pytest

from wildtrip.db.content_kinds import NEWS, PROTECTED_AREA, SPECIES
from wildtrip.db.services import query_service
from wildtrip.db.services.query_service import ListFilters
from wildtrip.lib.exceptions import NotFoundError, ValidationError


class TestListFilters:
    """Parsing of query-string parameters."""

    def test_defaults(self):
        filters = ListFilters.from_params(SPECIES, {})
        assert filters.page == 1
        assert filters.limit is None
        assert filters.page_size(SPECIES) == 20
        assert filters.page_size(NEWS) == 10

    def test_page_size_is_a_synonym_for_limit(self):
        filters = ListFilters.from_params(SPECIES, {"pageSize": "5"})
        assert filters.limit == 5

    def test_limit_is_capped(self):
        filters = ListFilters.from_params(SPECIES, {"limit": "500"}, max_page_size=100)
        assert filters.limit == 100

    @pytest.mark.parametrize("params", [{"page": "0"}, {"page": "-1"}, {"limit": "0"}, {"page": "abc"}])
    def test_invalid_paging_is_rejected(self, params):
        with pytest.raises(ValidationError):
            ListFilters.from_params(SPECIES, params)

    def test_unknown_facets_are_dropped(self):
        filters = ListFilters.from_params(SPECIES, {"main_group": "mammal", "color": "red"})
        assert filters.facets == {"main_group": "mammal"}

    def test_sort_order_defaults_to_desc(self):
        assert ListFilters.from_params(SPECIES, {"sortOrder": "sideways"}).sort_order == "desc"
        assert ListFilters.from_params(SPECIES, {"sortOrder": "ASC"}).sort_order == "asc"


class TestFindAll:
    """find_all against a real database."""

    @pytest.mark.asyncio
    async def test_empty_table(self, db_session):
        page = await query_service.find_all(db_session, SPECIES)

        assert page.data == []
        assert page.pagination.total == 0
        assert page.pagination.total_pages == 0

    @pytest.mark.asyncio
    async def test_total_and_total_pages(self, db_session, make_species):
        for i in range(5):
            await make_species(slug=f"species-{i}", common_name=f"Species {i}")

        page = await query_service.find_all(db_session, SPECIES, ListFilters(page=2, limit=2))

        assert len(page.data) == 2
        assert page.pagination.to_dict() == {"page": 2, "pageSize": 2, "total": 5, "totalPages": 3}

    @pytest.mark.asyncio
    async def test_page_past_the_end_keeps_the_total(self, db_session, make_species):
        for i in range(3):
            await make_species(slug=f"species-{i}")

        page = await query_service.find_all(db_session, SPECIES, ListFilters(page=9, limit=2))

        assert page.data == []
        assert page.pagination.total == 3
        assert page.pagination.total_pages == 2

    @pytest.mark.asyncio
    async def test_status_filter(self, db_session, make_species):
        await make_species(slug="live")
        await make_species(slug="pending", status="draft")

        page = await query_service.find_all(db_session, SPECIES, ListFilters(status="draft"))

        assert [record.slug for record in page.data] == ["pending"]

    @pytest.mark.asyncio
    async def test_unknown_status_lists_everything(self, db_session, make_species):
        await make_species(slug="live")
        await make_species(slug="pending", status="draft")

        page = await query_service.find_all(db_session, SPECIES, ListFilters(status="bogus"))

        assert page.pagination.total == 2

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_across_fields(self, db_session, make_species):
        await make_species(slug="puma", common_name="Puma", scientific_name="Puma concolor")
        await make_species(slug="huemul", common_name="Huemul", scientific_name="Hippocamelus bisulcus")

        by_common = await query_service.find_all(db_session, SPECIES, ListFilters(search="PUMA"))
        by_scientific = await query_service.find_all(db_session, SPECIES, ListFilters(search="bisul"))

        assert [r.slug for r in by_common.data] == ["puma"]
        assert [r.slug for r in by_scientific.data] == ["huemul"]

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, db_session, make_species):
        await make_species(slug="puma")

        page = await query_service.find_all(db_session, SPECIES, ListFilters(search="%"))

        assert page.data == []

    @pytest.mark.asyncio
    async def test_facets_filter_and_ignore_invalid_values(self, db_session, make_species):
        await make_species(slug="puma", main_group="mammal", conservation_status="least_concern")
        await make_species(slug="condor", common_name="Condor", main_group="bird")

        mammals = await query_service.find_all(
            db_session, SPECIES, ListFilters(facets={"main_group": "mammal"})
        )
        wildcard = await query_service.find_all(
            db_session, SPECIES, ListFilters(facets={"main_group": "all"})
        )
        invalid = await query_service.find_all(
            db_session, SPECIES, ListFilters(facets={"main_group": "dragon"})
        )

        assert [r.slug for r in mammals.data] == ["puma"]
        assert wildcard.pagination.total == 2
        assert invalid.pagination.total == 2

    @pytest.mark.asyncio
    async def test_protected_area_type_facet_maps_to_column(self, db_session, make_area):
        await make_area(slug="torres-del-paine", area_type="national_park", region="magallanes")
        await make_area(slug="la-campana", name="La Campana", area_type="national_reserve", region="valparaiso")

        page = await query_service.find_all(
            db_session, PROTECTED_AREA, ListFilters(facets={"type": "national_park", "region": "magallanes"})
        )

        assert [r.slug for r in page.data] == ["torres-del-paine"]

    @pytest.mark.asyncio
    async def test_sorting_breaks_ties_by_id(self, db_session, make_species):
        first = await make_species(slug="a", common_name="Same")
        second = await make_species(slug="b", common_name="Same")
        third = await make_species(slug="c", common_name="Other")

        page = await query_service.find_all(
            db_session, SPECIES, ListFilters(sort_by="commonName", sort_order="asc")
        )

        assert [r.id for r in page.data] == [third.id, first.id, second.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("total,limit", [(7, 2), (6, 3), (5, 5), (4, 10), (1, 1)])
    async def test_pages_cover_every_record_once(self, db_session, make_species, total, limit):
        for i in range(total):
            await make_species(slug=f"tied-{i}", common_name="Same")

        seen = []
        first = await query_service.find_all(
            db_session, SPECIES, ListFilters(page=1, limit=limit, sort_by="commonName", sort_order="asc")
        )
        assert first.pagination.total == total
        assert first.pagination.total_pages == math.ceil(total / limit)

        for page_number in range(1, first.pagination.total_pages + 1):
            page = await query_service.find_all(
                db_session,
                SPECIES,
                ListFilters(page=page_number, limit=limit, sort_by="commonName", sort_order="asc"),
            )
            seen.extend(record.id for record in page.data)

        assert len(seen) == total
        assert len(set(seen)) == total

    @pytest.mark.asyncio
    async def test_invalid_sort_key_falls_back_to_created_at(self, db_session, make_species):
        await make_species(slug="a")

        page = await query_service.find_all(db_session, SPECIES, ListFilters(sort_by="'; DROP TABLE"))

        assert len(page.data) == 1


class TestLookups:
    """Single-record lookups."""

    @pytest.mark.asyncio
    async def test_find_by_slug_published_only(self, db_session, make_species):
        await make_species(slug="pending", status="draft")

        assert await query_service.find_by_slug(db_session, SPECIES, "pending") is not None
        assert await query_service.find_by_slug(db_session, SPECIES, "pending", published_only=True) is None

    @pytest.mark.asyncio
    async def test_require_record_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await query_service.require_record(db_session, SPECIES, 404)

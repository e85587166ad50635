import logging

from horeca_catalog.models.product import LIST_PROJECTION_FIELDS
from horeca_catalog.services.product_query import (
    ProductListParams,
    ProductQueryBuilder,
    build_pagination,
    compute_skip,
    parse_dynamic_filters,
)

PLATES_ID = "65f000000000000000000001"
BOWLS_ID = "65f000000000000000000002"


class StubCategoryCache:
    def __init__(self, closures=None):
        self.closures = closures or {}
        self.requested = []

    async def get_category_ids_with_children(self, slug):
        self.requested.append(slug)
        return self.closures.get(slug, [])


def contains_text_clause(value, depth=0):
    """depth > 0 인 위치에 $text 가 있으면 True"""
    if isinstance(value, dict):
        for key, inner in value.items():
            if key == "$text" and depth > 0:
                return True
            if contains_text_clause(inner, depth + 1):
                return True
    elif isinstance(value, list):
        return any(contains_text_clause(item, depth) for item in value)
    return False


async def build(**kwargs):
    cache = StubCategoryCache({"tableware": [PLATES_ID, BOWLS_ID]})
    return await ProductQueryBuilder(cache).build(ProductListParams(**kwargs))


class TestQueryBuilder:
    async def test_no_params(self):
        query = await build()
        assert query.filter == {}
        assert query.sort == [("created_at", -1)]
        assert query.skip == 0
        assert query.limit == 24
        assert set(query.projection) == set(LIST_PROJECTION_FIELDS)
        assert query.use_text_search is False

    async def test_search_only_merges_text_at_root(self):
        query = await build(search="  coffee cup ")
        assert query.filter == {"$text": {"$search": "coffee cup"}}
        assert query.sort == [("score", {"$meta": "textScore"}), ("created_at", -1)]
        assert query.projection["score"] == {"$meta": "textScore"}

    async def test_search_with_filters_keeps_text_first_at_root(self):
        query = await build(
            search="cup",
            category="tableware",
            price_min="100",
            brands="Acme,Borosil",
            filters='{"material": ["porcelain"]}',
        )
        assert query.filter["$and"][0] == {"$text": {"$search": "cup"}}
        assert not contains_text_clause(query.filter["$and"][1:], depth=1)
        assert len(query.filter["$and"]) == 5

    async def test_category_condition_matches_either_field(self):
        query = await build(category="tableware")
        (condition,) = query.filter["$and"]
        ids = condition["$or"][0]["category_id"]["$in"]
        assert [str(oid) for oid in ids] == [PLATES_ID, BOWLS_ID]
        assert condition["$or"][1] == {"category_ids": {"$in": ids}}

    async def test_unknown_category_yields_empty_in(self):
        query = await build(category="nope")
        (condition,) = query.filter["$and"]
        assert condition["$or"][0] == {"category_id": {"$in": []}}

    async def test_price_bounds(self):
        query = await build(price_min="10.5", price_max="99")
        assert query.filter == {"$and": [{"price": {"$gte": 10.5, "$lte": 99.0}}]}

    async def test_invalid_price_ignored(self):
        query = await build(price_min="abc", price_max="")
        assert query.filter == {}

    async def test_featured_only_when_true(self):
        assert (await build(featured="true")).filter == {"$and": [{"featured": True}]}
        assert (await build(featured="false")).filter == {}

    async def test_brands_and_colors_split_csv(self):
        query = await build(brands=" Acme , ,Borosil", colors="White,Black")
        assert {"brand": {"$in": ["Acme", "Borosil"]}} in query.filter["$and"]
        assert {"color_variants.color_name": {"$in": ["White", "Black"]}} in query.filter["$and"]

    async def test_dynamic_filters_normalized(self):
        query = await build(filters='{"MATERIAL": ["stainless STEEL", " porcelain"], "size": ["12 inch"]}')
        assert query.filter["$and"] == [
            {"filters": {"$elemMatch": {"key": "Material", "values": {"$in": ["Stainless steel", "Porcelain"]}}}},
            {"filters": {"$elemMatch": {"key": "Size", "values": {"$in": ["12 inch"]}}}},
        ]

    async def test_url_encoded_filters(self):
        query = await build(filters="%7B%22usage%22%3A%5B%22hotel%22%5D%7D")
        assert query.filter["$and"] == [
            {"filters": {"$elemMatch": {"key": "Usage", "values": {"$in": ["Hotel"]}}}},
        ]

    async def test_sort_by_price(self):
        assert (await build(sort_by="price-asc")).sort == [("price", 1)]
        assert (await build(sort_by="price-desc", search="cup")).sort == [("price", -1)]

    async def test_pagination_skip(self):
        query = await build(page=2, limit=24)
        assert query.skip == 24

    async def test_single_item_fetch_has_no_projection(self):
        assert (await build(limit=1)).projection is None

    async def test_context_filter_excludes_user_facets(self):
        cache = StubCategoryCache({"tableware": [PLATES_ID]})
        builder = ProductQueryBuilder(cache)
        context = await builder.build_context_filter(ProductListParams(
            category="tableware", business="cafe", search="mug", price_min="10", brands="Acme", colors="Red",
        ))
        assert context["$and"][0] == {"$text": {"$search": "mug"}}
        assert context["$and"][2] == {"business_type_slugs": "cafe"}
        assert len(context["$and"]) == 3


class TestDynamicFilterParsing:
    def test_malformed_json_is_ignored(self, caplog):
        with caplog.at_level(logging.WARNING, logger="horeca_catalog.services.product_query"):
            assert parse_dynamic_filters("{material: [") == []
        assert "Failed to parse filters param." in caplog.text

    def test_non_object_is_ignored(self):
        assert parse_dynamic_filters('["material"]') == []

    def test_empty_values_dropped(self):
        assert parse_dynamic_filters('{"material": [], "color": ["  "], "usage": ["bar"]}') == [("Usage", ["Bar"])]

    def test_keys_normalizing_to_same_label_stay_separate(self):
        assert parse_dynamic_filters('{"material": ["porcelain"], "MATERIAL": ["steel"]}') == [
            ("Material", ["Porcelain"]),
            ("Material", ["Steel"]),
        ]


class TestPagination:
    def test_compute_skip(self):
        assert compute_skip(1, 24) == 0
        assert compute_skip(3, 10) == 20
        assert compute_skip(0, 24) == 0

    def test_total_pages_rounds_up(self):
        pagination = build_pagination(total=49, page=2, limit=24)
        assert pagination["total_pages"] == 3
        assert pagination["has_next_page"] is True
        assert pagination["has_prev_page"] is True

    def test_last_page(self):
        pagination = build_pagination(total=48, page=2, limit=24)
        assert pagination["total_pages"] == 2
        assert pagination["has_next_page"] is False

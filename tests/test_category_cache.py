from horeca_catalog.config import database
from horeca_catalog.models.category import build_category_tree, collect_descendant_ids, find_node
from horeca_catalog.services.category_cache import CategoryTreeCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def make_cache(mongo_db, clock=None, ttl_seconds=600):
    async def categories():
        return mongo_db[database.CATEGORIES]

    if clock is None:
        return CategoryTreeCache(categories, ttl_seconds=ttl_seconds)
    return CategoryTreeCache(categories, ttl_seconds=ttl_seconds, clock=clock)


class TestBuildCategoryTree:
    def test_children_grouped_and_sorted_by_name(self):
        tree = build_category_tree([
            {"id": "1", "name": "Tableware", "parent_id": None},
            {"id": "2", "name": "Plates", "parent_id": "1"},
            {"id": "3", "name": "Bowls", "parent_id": "1"},
        ])
        assert [node["name"] for node in tree] == ["Tableware"]
        assert [child["name"] for child in tree[0]["children"]] == ["Bowls", "Plates"]
        assert tree[0]["children"][0]["children"] == []

    def test_orphan_becomes_root(self):
        tree = build_category_tree([
            {"id": "1", "name": "Cutlery", "parent_id": "missing"},
        ])
        assert [node["id"] for node in tree] == ["1"]

    def test_cycle_is_not_reachable(self):
        tree = build_category_tree([
            {"id": "1", "name": "Root", "parent_id": None},
            {"id": "2", "name": "A", "parent_id": "3"},
            {"id": "3", "name": "B", "parent_id": "2"},
        ])
        assert [node["id"] for node in tree] == ["1"]
        assert find_node(tree, "2") is None

    def test_collect_descendant_ids_includes_self(self):
        tree = build_category_tree([
            {"id": "1", "name": "Tableware", "parent_id": None},
            {"id": "2", "name": "Plates", "parent_id": "1"},
            {"id": "4", "name": "Dinner Plates", "parent_id": "2"},
        ])
        assert sorted(collect_descendant_ids(tree[0])) == ["1", "2", "4"]


class TestCategoryTreeCache:
    async def test_ids_with_children_for_parent(self, mongo_db, tableware_tree):
        cache = make_cache(mongo_db)
        ids = await cache.get_category_ids_with_children("tableware")
        expected = {str(tableware_tree[slug]) for slug in ("tableware", "plates", "bowls")}
        assert set(ids) == expected
        assert len(ids) == 3

    async def test_ids_with_children_for_leaf(self, mongo_db, tableware_tree):
        cache = make_cache(mongo_db)
        assert await cache.get_category_ids_with_children("plates") == [str(tableware_tree["plates"])]

    async def test_unknown_slug_returns_empty(self, mongo_db, tableware_tree):
        cache = make_cache(mongo_db)
        assert await cache.get_category_ids_with_children("does-not-exist") == []

    async def test_tree_served_from_cache_until_ttl(self, mongo_db, tableware_tree):
        clock = FakeClock()
        cache = make_cache(mongo_db, clock=clock, ttl_seconds=600)

        first = await cache.get_tree()
        await mongo_db[database.CATEGORIES].insert_one(
            {"name": "Glassware", "slug": "glassware", "level": "department", "parent_id": None})

        clock.now += 599
        assert await cache.get_tree() is first

        clock.now += 2
        rebuilt = await cache.get_tree()
        assert "Glassware" in [node["name"] for node in rebuilt]

    async def test_ids_cache_dropped_when_tree_expires(self, mongo_db, tableware_tree):
        clock = FakeClock()
        cache = make_cache(mongo_db, clock=clock, ttl_seconds=600)
        assert len(await cache.get_category_ids_with_children("tableware")) == 3

        await mongo_db[database.CATEGORIES].insert_one(
            {"name": "Saucers", "slug": "saucers", "level": "category", "parent_id": tableware_tree["tableware"]})
        assert len(await cache.get_category_ids_with_children("tableware")) == 3

        clock.now += 601
        assert len(await cache.get_category_ids_with_children("tableware")) == 4

    async def test_clear_forces_rebuild(self, mongo_db, tableware_tree):
        cache = make_cache(mongo_db)
        assert len(await cache.get_category_ids_with_children("tableware")) == 3

        await mongo_db[database.CATEGORIES].insert_one(
            {"name": "Saucers", "slug": "saucers", "level": "category", "parent_id": tableware_tree["tableware"]})
        cache.clear()

        assert len(await cache.get_category_ids_with_children("tableware")) == 4

    async def test_descendant_ids_by_id(self, mongo_db, tableware_tree):
        cache = make_cache(mongo_db)
        ids = await cache.get_descendant_ids(str(tableware_tree["tableware"]))
        assert str(tableware_tree["bowls"]) in ids
        assert str(tableware_tree["kitchen"]) not in ids

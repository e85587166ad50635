from horeca_catalog.config import database


class TestCategoryListing:
    async def test_flat_list_sorted_by_name_with_parent(self, client, tableware_tree):
        response = await client.get("/api/categories/")
        assert response.status_code == 200
        categories = response.json()["categories"]
        assert [c["name"] for c in categories] == ["Bowls", "Kitchen", "Plates", "Tableware"]
        bowls = categories[0]
        assert bowls["parentId"] == str(tableware_tree["tableware"])
        assert bowls["parent"]["slug"] == "tableware"
        assert "children" not in bowls

    async def test_parent_null_returns_roots(self, client, tableware_tree):
        response = await client.get("/api/categories/", params={"parent": "null"})
        assert [c["slug"] for c in response.json()["categories"]] == ["kitchen", "tableware"]

    async def test_filter_by_parent_and_level(self, client, tableware_tree):
        response = await client.get("/api/categories/", params={
            "parent": str(tableware_tree["tableware"]), "level": "category",
        })
        assert [c["slug"] for c in response.json()["categories"]] == ["bowls", "plates"]

    async def test_tree(self, client, tableware_tree):
        response = await client.get("/api/categories/", params={"tree": "true"})
        tree = response.json()["categories"]
        assert [node["slug"] for node in tree] == ["kitchen", "tableware"]
        assert [child["slug"] for child in tree[1]["children"]] == ["bowls", "plates"]
        assert tree[0]["children"] == []


class TestCategoryWrites:
    async def test_create_derives_slug_and_clears_cache(self, client, tableware_tree):
        before = (await client.get("/api/categories/", params={"tree": "true"})).json()["categories"]
        assert len(before[1]["children"]) == 2

        response = await client.post("/api/categories/", json={
            "name": "Cups & Saucers",
            "level": "category",
            "parentId": str(tableware_tree["tableware"]),
        })
        assert response.status_code == 201
        assert response.json()["category"]["slug"] == "cups-saucers"
        assert response.json()["category"]["parent"]["name"] == "Tableware"

        after = (await client.get("/api/categories/", params={"tree": "true"})).json()["categories"]
        assert [child["slug"] for child in after[1]["children"]] == ["bowls", "cups-saucers", "plates"]

    async def test_create_duplicate_slug(self, client, tableware_tree):
        response = await client.post("/api/categories/", json={"name": "Plates", "level": "category"})
        assert response.status_code == 400

    async def test_create_requires_valid_level(self, client):
        response = await client.post("/api/categories/", json={"name": "Misc", "level": "aisle"})
        assert response.status_code == 422

    async def test_create_with_missing_parent(self, client):
        response = await client.post("/api/categories/", json={
            "name": "Orphan", "level": "category", "parentId": "65f000000000000000000000",
        })
        assert response.status_code == 400

    async def test_get_and_404(self, client, tableware_tree):
        response = await client.get(f"/api/categories/{tableware_tree['plates']}")
        assert response.json()["category"]["name"] == "Plates"
        assert (await client.get("/api/categories/65f000000000000000000000")).status_code == 404

    async def test_update_rejects_descendant_as_parent(self, client, tableware_tree):
        response = await client.put(f"/api/categories/{tableware_tree['tableware']}", json={
            "parentId": str(tableware_tree["plates"]),
        })
        assert response.status_code == 400

        response = await client.put(f"/api/categories/{tableware_tree['tableware']}", json={
            "parentId": str(tableware_tree["tableware"]),
        })
        assert response.status_code == 400

    async def test_update_moves_category(self, client, tableware_tree):
        response = await client.put(f"/api/categories/{tableware_tree['bowls']}", json={
            "parentId": str(tableware_tree["kitchen"]),
            "tagline": " Mixing bowls ",
        })
        assert response.status_code == 200
        assert response.json()["category"]["parent"]["slug"] == "kitchen"
        assert response.json()["category"]["tagline"] == "Mixing bowls"

        tree = (await client.get("/api/categories/", params={"tree": "true"})).json()["categories"]
        assert [child["slug"] for child in tree[0]["children"]] == ["bowls"]

    async def test_delete_with_children_rejected(self, client, tableware_tree):
        response = await client.delete(f"/api/categories/{tableware_tree['tableware']}")
        assert response.status_code == 400

    async def test_delete_leaf(self, client, tableware_tree):
        response = await client.delete(f"/api/categories/{tableware_tree['plates']}")
        assert response.status_code == 200
        assert (await client.delete(f"/api/categories/{tableware_tree['plates']}")).status_code == 404

    async def test_delete_leaf_clears_cached_tree_and_closure(self, client, mongo_db, tableware_tree):
        await mongo_db[database.PRODUCTS].insert_many([
            {"title": "Plate", "slug": "plate", "hero_image": "p.jpg", "price": 10, "category_id": tableware_tree["plates"]},
            {"title": "Bowl", "slug": "bowl", "hero_image": "b.jpg", "price": 12, "category_id": tableware_tree["bowls"]},
        ])
        tree = (await client.get("/api/categories/", params={"tree": "true"})).json()["categories"]
        assert [child["slug"] for child in tree[1]["children"]] == ["bowls", "plates"]
        assert (await client.get("/api/products/", params={"category": "tableware"})).json()["total"] == 2

        assert (await client.delete(f"/api/categories/{tableware_tree['plates']}")).status_code == 200

        tree = (await client.get("/api/categories/", params={"tree": "true"})).json()["categories"]
        assert [child["slug"] for child in tree[1]["children"]] == ["bowls"]
        products = (await client.get("/api/products/", params={"category": "tableware"})).json()
        assert [p["slug"] for p in products["products"]] == ["bowl"]

    async def test_update_ignores_null_for_required_fields(self, client, tableware_tree):
        created = (await client.post("/api/categories/", json={
            "name": "Glassware", "level": "category", "tagline": "Clear", "image": "g.jpg",
            "parentId": str(tableware_tree["tableware"]),
        })).json()["category"]

        response = await client.put(f"/api/categories/{created['id']}", json={
            "name": None, "level": None, "tagline": None, "image": None,
        })
        assert response.status_code == 200
        category = response.json()["category"]
        assert category["name"] == "Glassware"
        assert category["tagline"] == "Clear"
        assert category["image"] == "g.jpg"
        assert category["parentId"] == str(tableware_tree["tableware"])

    async def test_update_null_parent_moves_to_root(self, client, tableware_tree):
        response = await client.put(f"/api/categories/{tableware_tree['bowls']}", json={"parentId": None})
        assert response.status_code == 200
        assert response.json()["category"]["parentId"] is None
        roots = (await client.get("/api/categories/", params={"parent": "null"})).json()["categories"]
        assert [c["slug"] for c in roots] == ["bowls", "kitchen", "tableware"]

"""Pytest configuration: in-memory MongoDB collections and an HTTP client over the ASGI app."""

import os

os.environ.setdefault("OTEL_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from horeca_catalog.config import database
from horeca_catalog.services.category_cache import CategoryTreeCache, get_category_cache


@pytest.fixture
def mongo_db():
    return AsyncMongoMockClient()["horeca_catalog_test"]


@pytest.fixture
def category_cache(mongo_db):
    async def categories():
        return mongo_db[database.CATEGORIES]

    return CategoryTreeCache(categories, ttl_seconds=600)


@pytest.fixture
def app(mongo_db, category_cache):
    from horeca_catalog.main import app as fastapi_app

    def collection_override(name):
        async def _collection():
            return mongo_db[name]
        return _collection

    fastapi_app.dependency_overrides[database.get_product_collection] = collection_override(database.PRODUCTS)
    fastapi_app.dependency_overrides[database.get_category_collection] = collection_override(database.CATEGORIES)
    fastapi_app.dependency_overrides[database.get_business_type_collection] = collection_override(database.BUSINESS_TYPES)
    fastapi_app.dependency_overrides[database.get_enquiry_collection] = collection_override(database.ENQUIRIES)
    fastapi_app.dependency_overrides[database.get_customer_collection] = collection_override(database.CUSTOMERS)
    fastapi_app.dependency_overrides[get_category_cache] = lambda: category_cache
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    # ASGITransport 는 lifespan 을 실행하지 않으므로 실제 MongoDB 연결이 없다
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
async def tableware_tree(mongo_db):
    """tableware > (plates, bowls), kitchen 은 별도 루트. slug -> ObjectId"""
    categories = mongo_db[database.CATEGORIES]
    ids = {}
    ids["tableware"] = (await categories.insert_one(
        {"name": "Tableware", "slug": "tableware", "level": "department", "parent_id": None})).inserted_id
    ids["kitchen"] = (await categories.insert_one(
        {"name": "Kitchen", "slug": "kitchen", "level": "department", "parent_id": None})).inserted_id
    ids["plates"] = (await categories.insert_one(
        {"name": "Plates", "slug": "plates", "level": "category", "parent_id": ids["tableware"]})).inserted_id
    ids["bowls"] = (await categories.insert_one(
        {"name": "Bowls", "slug": "bowls", "level": "category", "parent_id": ids["tableware"]})).inserted_id
    return ids

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, TEXT

from horeca_catalog.core.config import settings

logger = logging.getLogger(__name__)

PRODUCTS = "products"
CATEGORIES = "categories"
BUSINESS_TYPES = "business_types"
ENQUIRIES = "enquiries"
CUSTOMERS = "customers"

# 공유 MongoDB 클라이언트
_mongo_client: AsyncIOMotorClient | None = None


def get_mongo_client() -> AsyncIOMotorClient:
    """MongoDB 클라이언트 객체를 반환 (lazy singleton)"""
    global _mongo_client

    if _mongo_client is None:
        try:
            _mongo_client = AsyncIOMotorClient(settings.MONGODB_URL)
            logger.info("MongoDB client initialized.", extra={"database": settings.MONGODB_DATABASE})
        except Exception as e:
            logger.error("Failed to initialize MongoDB client.", extra={"error": str(e)}, exc_info=True)
            raise

    return _mongo_client


def get_database() -> AsyncIOMotorDatabase:
    return get_mongo_client()[settings.MONGODB_DATABASE]


async def get_product_collection() -> AsyncIOMotorCollection:
    return get_database()[PRODUCTS]


async def get_category_collection() -> AsyncIOMotorCollection:
    return get_database()[CATEGORIES]


async def get_business_type_collection() -> AsyncIOMotorCollection:
    return get_database()[BUSINESS_TYPES]


async def get_enquiry_collection() -> AsyncIOMotorCollection:
    return get_database()[ENQUIRIES]


async def get_customer_collection() -> AsyncIOMotorCollection:
    return get_database()[CUSTOMERS]


async def ensure_indexes(db: AsyncIOMotorDatabase):
    """컬렉션 인덱스 생성 (이미 있으면 no-op)"""
    products = db[PRODUCTS]
    await products.create_index("slug", unique=True)
    await products.create_index([("title", TEXT), ("description", TEXT), ("brand", TEXT), ("tags", TEXT)],
                                name="product_text_search")
    await products.create_index([("category_id", ASCENDING)])
    await products.create_index([("category_ids", ASCENDING)])
    await products.create_index([("created_at", DESCENDING)])

    categories = db[CATEGORIES]
    await categories.create_index("slug", unique=True)
    await categories.create_index([("parent_id", ASCENDING), ("level", ASCENDING)])

    business_types = db[BUSINESS_TYPES]
    await business_types.create_index("slug", unique=True)
    await business_types.create_index("name", unique=True)

    enquiries = db[ENQUIRIES]
    await enquiries.create_index([("created_at", DESCENDING)])
    await enquiries.create_index([("status", ASCENDING)])
    await enquiries.create_index([("email", ASCENDING)])

    customers = db[CUSTOMERS]
    await customers.create_index([("email", ASCENDING), ("phone", ASCENDING)])
    logger.info("MongoDB indexes ensured.", extra={"database": db.name})


async def ping_database() -> bool:
    await get_mongo_client().admin.command("ping")
    return True


def close_mongo_client():
    global _mongo_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None
        logger.info("MongoDB client closed.")

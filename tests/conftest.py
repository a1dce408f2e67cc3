"""Test configuration for the query planner package."""

import pytest

from mongo_query_planner import MongoConnectionManager

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
async def mongo_connection():
    """Create a MongoDB connection backed by mongomock."""
    try:
        from mongomock_motor import AsyncMongoMockClient

        connection = MongoConnectionManager.__new__(MongoConnectionManager)
        connection._client = AsyncMongoMockClient(default_database_name="test_db")
        connection._database = "test_db"
        connection._url = "mongodb://mock:27017"

        async def _mock_connect():
            return connection._client

        connection.connect = _mock_connect

        yield connection

    except ImportError:
        pytest.skip("mongomock-motor not installed")


@pytest.fixture
async def orders(mongo_connection):
    """An ``orders`` collection seeded with ten documents."""
    collection = mongo_connection.get_collection("orders")
    await collection.insert_many(
        [
            {
                "name": f"item{i}",
                "value": i,
                "category": "A" if i % 2 == 0 else "B",
                "tags": ["x"],
            }
            for i in range(10)
        ]
    )
    yield collection
    await collection.drop()

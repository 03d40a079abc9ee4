"""MongoDB Resource for Dagster."""

from contextlib import contextmanager
from typing import Optional

from dagster import ConfigurableResource
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError


class MongoDBResource(ConfigurableResource):
    """
    Dagster resource for MongoDB connections.

    Usage:
        with mongo.get_client() as client:
            collection = mongo.get_collection(client, "rate_limiter")
            # ... do work
    """

    connection_string: str = "mongodb://localhost:27017/"
    """MongoDB connection string"""

    database_name: str = "chambress"

    @contextmanager
    def get_client(self):
        """
        Get a MongoDB client as a context manager.

        Yields:
            MongoClient: Connected MongoDB client
        """
        client = MongoClient(self.connection_string)
        try:
            # Test connection
            client.admin.command('ping')
            yield client
        finally:
            client.close()

    def get_database(self, client: MongoClient) -> Database:
        return client[self.database_name]

    def get_collection(self, client: MongoClient, collection_name: str) -> Collection:
        """
        Get a collection from the configured database.

        Args:
            client: MongoDB client
            collection_name: Name of the collection

        Returns:
            Collection: MongoDB collection
        """
        return self.get_database(client)[collection_name]


class MongoTimestampStore:
    """Last-call timestamp shared by every process pointing at the same MongoDB.

    Connects and disconnects on every call. Claims go through a conditional
    update on the previously read value, so two workers reading the same stale
    timestamp cannot both win the slot.
    """

    COLLECTION = "rate_limiter"

    def __init__(self, mongo: MongoDBResource, key: str = "last-congress-api-call"):
        self.mongo = mongo
        self.key = key

    def get(self) -> Optional[float]:
        with self.mongo.get_client() as client:
            doc = self.mongo.get_collection(client, self.COLLECTION).find_one({"_id": self.key})
        if doc is None:
            return None
        return float(doc["timestamp"])

    def set(self, timestamp: float) -> None:
        with self.mongo.get_client() as client:
            self.mongo.get_collection(client, self.COLLECTION).update_one(
                {"_id": self.key}, {"$set": {"timestamp": timestamp}}, upsert=True
            )

    def compare_and_set(self, expected: Optional[float], timestamp: float) -> bool:
        with self.mongo.get_client() as client:
            collection = self.mongo.get_collection(client, self.COLLECTION)
            if expected is None:
                try:
                    collection.insert_one({"_id": self.key, "timestamp": timestamp})
                except DuplicateKeyError:
                    return False
                return True
            result = collection.update_one(
                {"_id": self.key, "timestamp": expected},
                {"$set": {"timestamp": timestamp}},
            )
            return result.matched_count == 1

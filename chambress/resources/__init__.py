"""Dagster resources for chambress."""
from chambress.resources.congress import ChambressResource
from chambress.resources.mongo import MongoDBResource, MongoTimestampStore

__all__ = [
    "ChambressResource",
    "MongoDBResource",
    "MongoTimestampStore",
]

"""
MongoDB access layer.

A single Store owns the MongoClient for the lifetime of the process and
hands out the collections used by the route handlers. It is created at
startup by the app's lifespan handler and closed at shutdown.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from loguru import logger
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.server_api import ServerApi

from config import Settings

# Never serialize password hashes out of the users collection.
USER_PUBLIC_PROJECTION = {"password": 0}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Store:
    def __init__(self, client: MongoClient, database_name: str):
        self.client = client
        self.db = client[database_name]
        self.music: Collection = self.db["music"]
        self.books: Collection = self.db["books"]
        self.blogs: Collection = self.db["blogs"]
        self.categories: Collection = self.db["categories"]
        self.users: Collection = self.db["users"]

    @classmethod
    def connect(cls, settings: Settings) -> "Store":
        client = MongoClient(settings.database_url, server_api=ServerApi("1"), tz_aware=True)
        store = cls(client, settings.database_name)
        try:
            store.ping()
            logger.success("Connected to MongoDB ({})", settings.database_name)
        except Exception as e:
            # The driver reconnects lazily; requests fail with 500 until it does.
            logger.error("MongoDB connection error: {}", e)
        store.ensure_indexes()
        return store

    def collection(self, name: str) -> Collection:
        return getattr(self, name)

    def ensure_indexes(self) -> None:
        try:
            self.users.create_index([("email", ASCENDING)], unique=True, name="email_unique")
            self.categories.create_index([("section", ASCENDING)], name="section")
        except Exception as e:
            logger.warning("Could not create indexes: {}", e)

    def ping(self) -> None:
        self.client.admin.command("ping")

    def collection_names(self) -> List[str]:
        return self.db.list_collection_names()

    def close(self) -> None:
        self.client.close()
        logger.info("MongoDB connection closed")


def parse_object_id(value: str) -> Optional[ObjectId]:
    """Return the ObjectId for a path segment, or None if it is malformed."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize_document(doc: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(doc)
    if "_id" in out:
        out["_id"] = str(out["_id"])
    return out


def create_document(collection: Collection, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document stamped with addedAt and return its id."""
    if isinstance(data, BaseModel):
        doc = data.model_dump(mode="json")
    else:
        doc = dict(data)
    doc["addedAt"] = utcnow()
    result = collection.insert_one(doc)
    return str(result.inserted_id)


def get_documents(
    collection: Collection,
    filter_dict: Optional[Dict[str, Any]] = None,
    projection: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    return [serialize_document(d) for d in collection.find(filter_dict or {}, projection)]

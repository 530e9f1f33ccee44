"""
Generic CRUD routes for the content collections.

Music, books and blogs share one shape: create, list, update and delete,
each guarded by the same presence check on a fixed list of fields. A
ResourceSpec describes one collection and build_resource_router turns it
into an APIRouter.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple, Type

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from auth import get_store
from database import Store, create_document, get_documents, parse_object_id, utcnow
from errors import MissingField, NotFound, store_errors
from schemas import Blog, Book, Music


@dataclass(frozen=True)
class ResourceSpec:
    kind: str
    label: str
    plural: str
    collection: str
    model: Type[BaseModel]
    fields: Tuple[str, ...]

    @property
    def id_key(self) -> str:
        return f"{self.kind}Id"


MUSIC = ResourceSpec(
    kind="music",
    label="Music",
    plural="music",
    collection="music",
    model=Music,
    fields=("title", "category", "audioUrl", "tags", "lyrics", "meanings"),
)
BOOK = ResourceSpec(
    kind="book",
    label="Book",
    plural="books",
    collection="books",
    model=Book,
    fields=("title", "category", "link", "tags"),
)
BLOG = ResourceSpec(
    kind="blog",
    label="Blog",
    plural="blogs",
    collection="blogs",
    model=Blog,
    fields=("title", "category", "blog", "tags"),
)

RESOURCES = (MUSIC, BOOK, BLOG)


def require_fields(payload: BaseModel, fields: Sequence[str], message: str = "All fields are required") -> Dict[str, Any]:
    """Return the named fields of payload, raising MissingField if any is empty."""
    data = payload.model_dump()
    values = {f: data.get(f) for f in fields}
    if not all(values.values()):
        raise MissingField(message)
    return values


def delete_by_id(store: Store, collection: str, item_id: str, label: str) -> JSONResponse:
    oid = parse_object_id(item_id)
    deleted = 0
    if oid is not None:
        with store_errors(f"deleting {label.lower()}"):
            deleted = store.collection(collection).delete_one({"_id": oid}).deleted_count

    if deleted == 1:
        logger.info("{} {} deleted", label, item_id)
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"message": f"{label} deleted successfully", "deletedCount": 1},
        )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"message": f"{label} not found", "deletedCount": 0},
    )


def build_resource_router(spec: ResourceSpec) -> APIRouter:
    router = APIRouter(tags=[spec.label])
    model = spec.model

    @router.post(f"/add-{spec.kind}", status_code=status.HTTP_201_CREATED)
    def add_item(payload: model = Body(...), store: Store = Depends(get_store)):  # type: ignore[valid-type]
        values = require_fields(payload, spec.fields)
        with store_errors(f"adding {spec.kind}"):
            new_id = create_document(store.collection(spec.collection), values)
        logger.info("{} added: {}", spec.label, new_id)
        return {"message": f"{spec.label} added successfully", spec.id_key: new_id}

    @router.get(f"/all-{spec.plural}")
    def list_items(store: Store = Depends(get_store)) -> List[Dict[str, Any]]:
        with store_errors(f"fetching {spec.plural}"):
            return get_documents(store.collection(spec.collection))

    @router.put(f"/update-{spec.kind}/{{item_id}}")
    def update_item(item_id: str, payload: model = Body(...), store: Store = Depends(get_store)):  # type: ignore[valid-type]
        values = require_fields(payload, spec.fields)
        not_found = NotFound(f"{spec.label} not found or no changes made")

        oid = parse_object_id(item_id)
        if oid is None:
            raise not_found

        values["updatedAt"] = utcnow()
        with store_errors(f"updating {spec.kind}"):
            result = store.collection(spec.collection).update_one({"_id": oid}, {"$set": values})
        if result.modified_count != 1:
            raise not_found
        return {"message": f"{spec.label} updated successfully"}

    @router.delete(f"/delete-{spec.kind}/{{item_id}}")
    def delete_item(item_id: str, store: Store = Depends(get_store)):
        return delete_by_id(store, spec.collection, item_id, spec.label)

    return router

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from loguru import logger

from auth import get_store
from crud import delete_by_id, require_fields
from database import Store, create_document, get_documents
from errors import InvalidField, store_errors
from schemas import Category, Section

router = APIRouter(tags=["Category"])

SECTIONS = [s.value for s in Section]


@router.post("/add-category", status_code=status.HTTP_201_CREATED)
def add_category(payload: Category, store: Store = Depends(get_store)):
    values = require_fields(payload, ("section", "category"), "Section and category are required")
    if values["section"] not in SECTIONS:
        raise InvalidField(f"Section must be one of: {', '.join(SECTIONS)}")

    with store_errors("adding category"):
        new_id = create_document(store.categories, values)
    logger.info("Category added: {} ({})", values["category"], values["section"])
    return {"message": "Category added successfully", "categoryId": new_id}


@router.get("/categories/{section}")
def list_categories(section: str, store: Store = Depends(get_store)) -> List[Dict[str, Any]]:
    with store_errors("fetching categories"):
        return get_documents(store.categories, {"section": section})


@router.delete("/delete-category/{item_id}")
def delete_category(item_id: str, store: Store = Depends(get_store)):
    return delete_by_id(store, "categories", item_id, "Category")

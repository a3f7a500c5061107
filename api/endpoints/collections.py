"""
Recipe Share Collection Endpoints
Collections and their recipe entries
"""

from typing import List, Optional

from fastapi import APIRouter, Body, status

from core.dependencies import AuthenticatedPrincipal, DbSession, PaginationParams, RequestPrincipal
from schemas.social_schemas import (
    CollectionCreate, CollectionDetailResponse, CollectionEntryIn, CollectionEntryResponse,
    CollectionResponse, CollectionUpdate,
)
from services.collection_service import collection_service

router = APIRouter()


def _detail(principal, collection) -> CollectionDetailResponse:
    payload = CollectionResponse.model_validate(collection).model_dump()
    entries = [CollectionEntryResponse.model_validate(entry) for entry in
               collection_service.visible_entries(principal, collection)]
    return CollectionDetailResponse(**payload, entries=entries)


@router.get("/", response_model=List[CollectionResponse])
def list_collections(
    principal: RequestPrincipal,
    db: DbSession,
    pagination: PaginationParams,
    owner_id: Optional[str] = None,
):
    items, _ = collection_service.list_collections(
        db, principal, owner_id=owner_id, page=pagination["page"], limit=pagination["limit"]
    )
    return items


@router.post("/", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
def create_collection(data: CollectionCreate, principal: AuthenticatedPrincipal, db: DbSession):
    return collection_service.create_collection(db, principal, data)


@router.get("/{collection_id}", response_model=CollectionDetailResponse)
def get_collection(collection_id: str, principal: RequestPrincipal, db: DbSession):
    collection = collection_service.get_collection(db, principal, collection_id)
    return _detail(principal, collection)


@router.put("/{collection_id}", response_model=CollectionResponse)
def update_collection(
    collection_id: str, data: CollectionUpdate, principal: AuthenticatedPrincipal, db: DbSession
):
    return collection_service.update_collection(db, principal, collection_id, data)


@router.delete("/{collection_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_collection(collection_id: str, principal: AuthenticatedPrincipal, db: DbSession):
    collection_service.delete_collection(db, principal, collection_id)


@router.post(
    "/{collection_id}/recipes/{recipe_id}",
    response_model=CollectionEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_recipe_to_collection(
    collection_id: str,
    recipe_id: str,
    principal: AuthenticatedPrincipal,
    db: DbSession,
    data: Optional[CollectionEntryIn] = Body(None),
):
    return collection_service.add_recipe(
        db, principal, collection_id, recipe_id, notes=data.notes if data else None
    )


@router.delete("/{collection_id}/recipes/{recipe_id}", response_model=CollectionResponse)
def remove_recipe_from_collection(
    collection_id: str, recipe_id: str, principal: AuthenticatedPrincipal, db: DbSession
):
    return collection_service.remove_recipe(db, principal, collection_id, recipe_id)

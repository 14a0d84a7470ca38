"""FastAPI routes for item CRUD, event history and projection rebuilds."""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from stockpile.items.schemas import (
    ItemEventResponse,
    ItemRequest,
    ItemResponse,
    ReplayReportResponse,
)
from stockpile.items.service import ItemNotFoundError, ItemService

router = APIRouter(prefix="/api/items", tags=["items"])

_NOT_FOUND = "Item not found"


def get_item_service() -> ItemService:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("ItemService not initialized")


@router.get("")
async def list_items(
    service: ItemService = Depends(get_item_service),
) -> list[ItemResponse]:
    return await service.list_items()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_item(
    request: ItemRequest,
    service: ItemService = Depends(get_item_service),
) -> ItemResponse:
    return await service.create_item(request)


@router.post("/rebuild")
async def rebuild_all(
    service: ItemService = Depends(get_item_service),
) -> ReplayReportResponse:
    return await service.rebuild()


@router.get("/{item_id}")
async def get_item(
    item_id: int,
    service: ItemService = Depends(get_item_service),
) -> ItemResponse:
    item = await service.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return item


@router.put("/{item_id}")
async def update_item(
    item_id: int,
    request: ItemRequest,
    service: ItemService = Depends(get_item_service),
) -> ItemResponse:
    try:
        return await service.update_item(item_id, request)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    service: ItemService = Depends(get_item_service),
) -> Response:
    try:
        await service.delete_item(item_id)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{item_id}/events")
async def get_item_events(
    item_id: int,
    service: ItemService = Depends(get_item_service),
) -> list[ItemEventResponse]:
    try:
        return await service.get_item_events(item_id)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)


@router.post("/{item_id}/rebuild")
async def rebuild_item(
    item_id: int,
    service: ItemService = Depends(get_item_service),
) -> ReplayReportResponse:
    return await service.rebuild(item_id)

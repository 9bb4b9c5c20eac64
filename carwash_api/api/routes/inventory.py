from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ADMIN_ONLY, ANY_ROLE, WRITE_ROLES, require_roles
from carwash_api.db.session import get_async_session
from carwash_api.schemas.common import MessageResponse
from carwash_api.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemRead,
    InventoryItemUpdate,
    StockAdjustment,
)
from carwash_api.services.inventory import InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory"])

read_guard = [Depends(require_roles(*ANY_ROLE))]
admin_guard = [Depends(require_roles(*ADMIN_ONLY))]


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[InventoryItemRead],
    summary="List inventory items",
    description="Stock items ordered by name.",
    dependencies=read_guard,
)
async def list_inventory_items(
    session: AsyncSession = Depends(get_async_session),
    limit: int = Query(100, ge=1, le=1000, description="Max records"),
    offset: int = Query(0, ge=0, description="Records to skip"),
) -> List[InventoryItemRead]:
    items = await InventoryService(session).list_items(limit=limit, offset=offset)
    return [InventoryItemRead.model_validate(i) for i in items]


# PUBLIC_INTERFACE
@router.get(
    "/alerts",
    response_model=List[InventoryItemRead],
    summary="Inventory alerts",
    description="Active items whose stock is low (bajo) or exhausted (critico).",
    dependencies=read_guard,
)
async def list_inventory_alerts(session: AsyncSession = Depends(get_async_session)) -> List[InventoryItemRead]:
    items = await InventoryService(session).list_alerts()
    return [InventoryItemRead.model_validate(i) for i in items]


# PUBLIC_INTERFACE
@router.get("/{item_id}", response_model=InventoryItemRead, summary="Get inventory item", dependencies=read_guard)
async def get_inventory_item(
    item_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> InventoryItemRead:
    return InventoryItemRead.model_validate(await InventoryService(session).get_item(item_id))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=InventoryItemRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create inventory item",
    dependencies=admin_guard,
)
async def create_inventory_item(
    payload: InventoryItemCreate,
    session: AsyncSession = Depends(get_async_session),
) -> InventoryItemRead:
    return InventoryItemRead.model_validate(await InventoryService(session).create_item(payload))


# PUBLIC_INTERFACE
@router.put("/{item_id}", response_model=InventoryItemRead, summary="Update inventory item", dependencies=admin_guard)
async def update_inventory_item(
    payload: InventoryItemUpdate,
    item_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> InventoryItemRead:
    return InventoryItemRead.model_validate(await InventoryService(session).update_item(item_id, payload))


# PUBLIC_INTERFACE
@router.put(
    "/{item_id}/stock",
    response_model=InventoryItemRead,
    summary="Adjust stock",
    description="Add or remove units. Removing more than the stock on hand returns 400.",
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def adjust_inventory_stock(
    payload: StockAdjustment,
    item_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> InventoryItemRead:
    return InventoryItemRead.model_validate(await InventoryService(session).adjust_stock(item_id, payload))


# PUBLIC_INTERFACE
@router.delete("/{item_id}", response_model=MessageResponse, summary="Delete inventory item", dependencies=admin_guard)
async def delete_inventory_item(
    item_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await InventoryService(session).delete_item(item_id)
    return MessageResponse(message="Producto eliminado")

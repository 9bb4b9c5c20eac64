from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ADMIN_ONLY, ANY_ROLE, WRITE_ROLES, require_roles
from carwash_api.db.session import get_async_session
from carwash_api.schemas.common import MessageResponse
from carwash_api.schemas.work_orders import (
    NextWorkOrderNumber,
    WorkOrderCreate,
    WorkOrderDetail,
    WorkOrderItemInput,
    WorkOrderStatus,
    WorkOrderStatusUpdate,
    WorkOrderUpdate,
)
from carwash_api.services.work_orders import WorkOrderService

router = APIRouter(prefix="/work-orders", tags=["Work Orders"])

read_guard = [Depends(require_roles(*ANY_ROLE))]
write_guard = [Depends(require_roles(*WRITE_ROLES))]


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[WorkOrderDetail],
    summary="List work orders",
    description="Most recent first, optionally filtered by status and customer.",
    dependencies=read_guard,
)
async def list_work_orders(
    session: AsyncSession = Depends(get_async_session),
    estado: Optional[WorkOrderStatus] = Query(None, description="Filter by status"),
    customer_id: Optional[UUID] = Query(None, description="Filter by customer"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[WorkOrderDetail]:
    items = await WorkOrderService(session).list_work_orders(
        estado=estado, customer_id=customer_id, limit=limit, offset=offset
    )
    return [WorkOrderDetail.model_validate(o) for o in items]


# PUBLIC_INTERFACE
@router.get(
    "/by-status/{estado}",
    response_model=List[WorkOrderDetail],
    summary="List work orders by status",
    dependencies=read_guard,
)
async def list_work_orders_by_status(
    estado: WorkOrderStatus,
    session: AsyncSession = Depends(get_async_session),
) -> List[WorkOrderDetail]:
    items = await WorkOrderService(session).list_work_orders(estado=estado)
    return [WorkOrderDetail.model_validate(o) for o in items]


# PUBLIC_INTERFACE
@router.get(
    "/by-customer/{customer_id}",
    response_model=List[WorkOrderDetail],
    summary="List work orders of a customer",
    dependencies=read_guard,
)
async def list_work_orders_by_customer(
    customer_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> List[WorkOrderDetail]:
    items = await WorkOrderService(session).list_work_orders(customer_id=customer_id)
    return [WorkOrderDetail.model_validate(o) for o in items]


# PUBLIC_INTERFACE
@router.get(
    "/next-number",
    response_model=NextWorkOrderNumber,
    summary="Next work order number",
    dependencies=read_guard,
)
async def next_work_order_number(session: AsyncSession = Depends(get_async_session)) -> NextWorkOrderNumber:
    return NextWorkOrderNumber(numero=await WorkOrderService(session).next_number())


# PUBLIC_INTERFACE
@router.get(
    "/{work_order_id}",
    response_model=WorkOrderDetail,
    summary="Get work order",
    description="Work order with its lines, customer and vehicle.",
    dependencies=read_guard,
)
async def get_work_order(
    work_order_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> WorkOrderDetail:
    return WorkOrderDetail.model_validate(await WorkOrderService(session).get_work_order(work_order_id))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=WorkOrderDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create work order",
    description="Opens the order in status 'recibido' with the next number; total is the sum of its lines.",
    dependencies=write_guard,
)
async def create_work_order(
    payload: WorkOrderCreate,
    session: AsyncSession = Depends(get_async_session),
) -> WorkOrderDetail:
    return WorkOrderDetail.model_validate(await WorkOrderService(session).create_work_order(payload))


# PUBLIC_INTERFACE
@router.put(
    "/{work_order_id}",
    response_model=WorkOrderDetail,
    summary="Update work order",
    description="Header fields only.",
    dependencies=write_guard,
)
async def update_work_order(
    payload: WorkOrderUpdate,
    work_order_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> WorkOrderDetail:
    return WorkOrderDetail.model_validate(await WorkOrderService(session).update_work_order(work_order_id, payload))


# PUBLIC_INTERFACE
@router.put(
    "/{work_order_id}/status",
    response_model=WorkOrderDetail,
    summary="Change work order status",
    description=(
        "Allowed: recibido→en_proceso|cancelado, en_proceso→terminado|cancelado, "
        "terminado→entregado|cancelado. entregado and cancelado are terminal."
    ),
    dependencies=write_guard,
)
async def change_work_order_status(
    payload: WorkOrderStatusUpdate,
    work_order_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> WorkOrderDetail:
    return WorkOrderDetail.model_validate(await WorkOrderService(session).change_status(work_order_id, payload.estado))


# PUBLIC_INTERFACE
@router.post(
    "/{work_order_id}/items",
    response_model=WorkOrderDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Add work order line",
    dependencies=write_guard,
)
async def add_work_order_item(
    payload: WorkOrderItemInput,
    work_order_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> WorkOrderDetail:
    return WorkOrderDetail.model_validate(await WorkOrderService(session).add_item(work_order_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{work_order_id}/items/{item_id}",
    response_model=WorkOrderDetail,
    summary="Remove work order line",
    dependencies=write_guard,
)
async def remove_work_order_item(
    work_order_id: UUID = Path(...),
    item_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> WorkOrderDetail:
    return WorkOrderDetail.model_validate(await WorkOrderService(session).remove_item(work_order_id, item_id))


# PUBLIC_INTERFACE
@router.delete(
    "/{work_order_id}",
    response_model=MessageResponse,
    summary="Delete work order",
    dependencies=[Depends(require_roles(*ADMIN_ONLY))],
)
async def delete_work_order(
    work_order_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await WorkOrderService(session).delete_work_order(work_order_id)
    return MessageResponse(message="Orden de trabajo eliminada")

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ANY_ROLE, WRITE_ROLES, require_roles
from carwash_api.db.session import get_async_session
from carwash_api.schemas.common import MessageResponse
from carwash_api.schemas.customers import (
    CustomerCreate,
    CustomerRead,
    CustomerUpdate,
    VehicleCreate,
    VehicleRead,
    VehicleUpdate,
)
from carwash_api.services.customers import CustomerService

customers_router = APIRouter(prefix="/customers", tags=["Customers"])
vehicles_router = APIRouter(prefix="/vehicles", tags=["Vehicles"])

read_guard = [Depends(require_roles(*ANY_ROLE))]
write_guard = [Depends(require_roles(*WRITE_ROLES))]


# PUBLIC_INTERFACE
@customers_router.get(
    "",
    response_model=List[CustomerRead],
    summary="List customers",
    description="Customers ordered by name. `search` matches name, document, email or phone.",
    dependencies=read_guard,
)
async def list_customers(
    session: AsyncSession = Depends(get_async_session),
    search: Optional[str] = Query(None, description="Free-text filter"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[CustomerRead]:
    items = await CustomerService(session).list_customers(search=search, limit=limit, offset=offset)
    return [CustomerRead.model_validate(c) for c in items]


# PUBLIC_INTERFACE
@customers_router.get("/{customer_id}", response_model=CustomerRead, summary="Get customer", dependencies=read_guard)
async def get_customer(
    customer_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> CustomerRead:
    return CustomerRead.model_validate(await CustomerService(session).get_customer(customer_id))


# PUBLIC_INTERFACE
@customers_router.post(
    "",
    response_model=CustomerRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create customer",
    description=(
        "Tourism-regime customers need country, passport and entry date. "
        "A RUC document must carry a valid check digit."
    ),
    dependencies=write_guard,
)
async def create_customer(
    payload: CustomerCreate,
    session: AsyncSession = Depends(get_async_session),
) -> CustomerRead:
    return CustomerRead.model_validate(await CustomerService(session).create_customer(payload))


# PUBLIC_INTERFACE
@customers_router.put("/{customer_id}", response_model=CustomerRead, summary="Update customer", dependencies=write_guard)
async def update_customer(
    payload: CustomerUpdate,
    customer_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> CustomerRead:
    return CustomerRead.model_validate(await CustomerService(session).update_customer(customer_id, payload))


# PUBLIC_INTERFACE
@customers_router.delete(
    "/{customer_id}",
    response_model=MessageResponse,
    summary="Delete customer",
    description="Fails with 409 when work orders or sales refer to the customer.",
    dependencies=write_guard,
)
async def delete_customer(
    customer_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await CustomerService(session).delete_customer(customer_id)
    return MessageResponse(message="Cliente eliminado")


# PUBLIC_INTERFACE
@vehicles_router.get("", response_model=List[VehicleRead], summary="List vehicles", dependencies=read_guard)
async def list_vehicles(
    session: AsyncSession = Depends(get_async_session),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[VehicleRead]:
    items = await CustomerService(session).list_vehicles(limit=limit, offset=offset)
    return [VehicleRead.model_validate(v) for v in items]


# PUBLIC_INTERFACE
@vehicles_router.get(
    "/by-customer/{customer_id}",
    response_model=List[VehicleRead],
    summary="List vehicles of a customer",
    dependencies=read_guard,
)
async def list_vehicles_by_customer(
    customer_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> List[VehicleRead]:
    items = await CustomerService(session).list_vehicles(customer_id=customer_id)
    return [VehicleRead.model_validate(v) for v in items]


# PUBLIC_INTERFACE
@vehicles_router.get("/{vehicle_id}", response_model=VehicleRead, summary="Get vehicle", dependencies=read_guard)
async def get_vehicle(
    vehicle_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> VehicleRead:
    return VehicleRead.model_validate(await CustomerService(session).get_vehicle(vehicle_id))


# PUBLIC_INTERFACE
@vehicles_router.post(
    "",
    response_model=VehicleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create vehicle",
    description="The owning customer must exist. Plates are stored uppercase.",
    dependencies=write_guard,
)
async def create_vehicle(
    payload: VehicleCreate,
    session: AsyncSession = Depends(get_async_session),
) -> VehicleRead:
    return VehicleRead.model_validate(await CustomerService(session).create_vehicle(payload))


# PUBLIC_INTERFACE
@vehicles_router.put("/{vehicle_id}", response_model=VehicleRead, summary="Update vehicle", dependencies=write_guard)
async def update_vehicle(
    payload: VehicleUpdate,
    vehicle_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> VehicleRead:
    return VehicleRead.model_validate(await CustomerService(session).update_vehicle(vehicle_id, payload))


# PUBLIC_INTERFACE
@vehicles_router.delete(
    "/{vehicle_id}",
    response_model=MessageResponse,
    summary="Delete vehicle",
    description="Fails with 409 when a work order refers to the vehicle.",
    dependencies=write_guard,
)
async def delete_vehicle(
    vehicle_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await CustomerService(session).delete_vehicle(vehicle_id)
    return MessageResponse(message="Vehículo eliminado")

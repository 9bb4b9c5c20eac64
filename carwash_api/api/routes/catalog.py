from __future__ import annotations

from typing import List, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ADMIN_ONLY, ANY_ROLE, require_roles
from carwash_api.db.session import get_async_session
from carwash_api.schemas.catalog import (
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    ServiceComboCreate,
    ServiceComboRead,
    ServiceComboUpdate,
    ServiceCreate,
    ServiceRead,
    ServiceUpdate,
)
from carwash_api.schemas.common import MessageResponse
from carwash_api.services.catalog import CatalogService

categories_router = APIRouter(prefix="/categories", tags=["Catalog"])
services_router = APIRouter(prefix="/services", tags=["Catalog"])
combos_router = APIRouter(prefix="/service-combos", tags=["Catalog"])

read_guard = [Depends(require_roles(*ANY_ROLE))]
admin_guard = [Depends(require_roles(*ADMIN_ONLY))]


# ---- Categories ----

# PUBLIC_INTERFACE
@categories_router.get("", response_model=List[CategoryRead], summary="List categories", dependencies=read_guard)
async def list_categories(session: AsyncSession = Depends(get_async_session)) -> List[CategoryRead]:
    items = await CatalogService(session).list_categories()
    return [CategoryRead.model_validate(c) for c in items]


# PUBLIC_INTERFACE
@categories_router.get("/active", response_model=List[CategoryRead], summary="List active categories", dependencies=read_guard)
async def list_active_categories(session: AsyncSession = Depends(get_async_session)) -> List[CategoryRead]:
    items = await CatalogService(session).list_categories(only_active=True)
    return [CategoryRead.model_validate(c) for c in items]


# PUBLIC_INTERFACE
@categories_router.get(
    "/by-type/{tipo}",
    response_model=List[CategoryRead],
    summary="List categories by type",
    description="Categories of the given type plus those marked 'ambos'.",
    dependencies=read_guard,
)
async def list_categories_by_type(
    tipo: Literal["servicios", "productos", "ambos"],
    session: AsyncSession = Depends(get_async_session),
) -> List[CategoryRead]:
    items = await CatalogService(session).list_categories(tipo=tipo)
    return [CategoryRead.model_validate(c) for c in items]


# PUBLIC_INTERFACE
@categories_router.get("/{category_id}", response_model=CategoryRead, summary="Get category", dependencies=read_guard)
async def get_category(
    category_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> CategoryRead:
    return CategoryRead.model_validate(await CatalogService(session).get_category(category_id))


# PUBLIC_INTERFACE
@categories_router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
    dependencies=admin_guard,
)
async def create_category(
    payload: CategoryCreate,
    session: AsyncSession = Depends(get_async_session),
) -> CategoryRead:
    return CategoryRead.model_validate(await CatalogService(session).create_category(payload))


# PUBLIC_INTERFACE
@categories_router.put("/{category_id}", response_model=CategoryRead, summary="Update category", dependencies=admin_guard)
async def update_category(
    payload: CategoryUpdate,
    category_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> CategoryRead:
    return CategoryRead.model_validate(await CatalogService(session).update_category(category_id, payload))


# PUBLIC_INTERFACE
@categories_router.delete("/{category_id}", response_model=MessageResponse, summary="Delete category", dependencies=admin_guard)
async def delete_category(
    category_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await CatalogService(session).delete_category(category_id)
    return MessageResponse(message="Categoría eliminada")


# ---- Services ----

# PUBLIC_INTERFACE
@services_router.get("", response_model=List[ServiceRead], summary="List services", dependencies=read_guard)
async def list_services(session: AsyncSession = Depends(get_async_session)) -> List[ServiceRead]:
    items = await CatalogService(session).list_services()
    return [ServiceRead.model_validate(s) for s in items]


# PUBLIC_INTERFACE
@services_router.get("/active", response_model=List[ServiceRead], summary="List active services", dependencies=read_guard)
async def list_active_services(session: AsyncSession = Depends(get_async_session)) -> List[ServiceRead]:
    items = await CatalogService(session).list_services(only_active=True)
    return [ServiceRead.model_validate(s) for s in items]


# PUBLIC_INTERFACE
@services_router.get("/{service_id}", response_model=ServiceRead, summary="Get service", dependencies=read_guard)
async def get_service(
    service_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> ServiceRead:
    return ServiceRead.model_validate(await CatalogService(session).get_service(service_id))


# PUBLIC_INTERFACE
@services_router.post(
    "",
    response_model=ServiceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create service",
    dependencies=admin_guard,
)
async def create_service(
    payload: ServiceCreate,
    session: AsyncSession = Depends(get_async_session),
) -> ServiceRead:
    return ServiceRead.model_validate(await CatalogService(session).create_service(payload))


# PUBLIC_INTERFACE
@services_router.put("/{service_id}", response_model=ServiceRead, summary="Update service", dependencies=admin_guard)
async def update_service(
    payload: ServiceUpdate,
    service_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> ServiceRead:
    return ServiceRead.model_validate(await CatalogService(session).update_service(service_id, payload))


# PUBLIC_INTERFACE
@services_router.delete("/{service_id}", response_model=MessageResponse, summary="Delete service", dependencies=admin_guard)
async def delete_service(
    service_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await CatalogService(session).delete_service(service_id)
    return MessageResponse(message="Servicio eliminado")


# ---- Service combos ----

# PUBLIC_INTERFACE
@combos_router.get("", response_model=List[ServiceComboRead], summary="List service combos", dependencies=read_guard)
async def list_combos(session: AsyncSession = Depends(get_async_session)) -> List[ServiceComboRead]:
    items = await CatalogService(session).list_combos()
    return [ServiceComboRead.model_validate(c) for c in items]


# PUBLIC_INTERFACE
@combos_router.get("/active", response_model=List[ServiceComboRead], summary="List active combos", dependencies=read_guard)
async def list_active_combos(session: AsyncSession = Depends(get_async_session)) -> List[ServiceComboRead]:
    items = await CatalogService(session).list_combos(only_active=True)
    return [ServiceComboRead.model_validate(c) for c in items]


# PUBLIC_INTERFACE
@combos_router.get(
    "/{combo_id}",
    response_model=ServiceComboRead,
    summary="Get service combo",
    description="Combo with the services it includes.",
    dependencies=read_guard,
)
async def get_combo(
    combo_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> ServiceComboRead:
    return ServiceComboRead.model_validate(await CatalogService(session).get_combo(combo_id))


# PUBLIC_INTERFACE
@combos_router.post(
    "",
    response_model=ServiceComboRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create service combo",
    description="A combo must include at least two distinct existing services.",
    dependencies=admin_guard,
)
async def create_combo(
    payload: ServiceComboCreate,
    session: AsyncSession = Depends(get_async_session),
) -> ServiceComboRead:
    return ServiceComboRead.model_validate(await CatalogService(session).create_combo(payload))


# PUBLIC_INTERFACE
@combos_router.put("/{combo_id}", response_model=ServiceComboRead, summary="Update service combo", dependencies=admin_guard)
async def update_combo(
    payload: ServiceComboUpdate,
    combo_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> ServiceComboRead:
    return ServiceComboRead.model_validate(await CatalogService(session).update_combo(combo_id, payload))


# PUBLIC_INTERFACE
@combos_router.delete(
    "/{combo_id}",
    response_model=ServiceComboRead,
    summary="Deactivate service combo",
    description="Combos are deactivated rather than deleted.",
    dependencies=admin_guard,
)
async def delete_combo(
    combo_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> ServiceComboRead:
    return ServiceComboRead.model_validate(await CatalogService(session).deactivate_combo(combo_id))

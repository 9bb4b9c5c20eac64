from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

from carwash_api.db.models.customers import Customer, Vehicle
from carwash_api.repositories.customers import CustomerRepository, VehicleRepository
from carwash_api.schemas.customers import CustomerCreate, CustomerUpdate, VehicleCreate, VehicleUpdate
from carwash_api.services import fiscal
from carwash_api.services.base import BaseService
from carwash_api.services.errors import BusinessRuleError, ConflictError, NotFoundError

TOURISM_FIELDS = ("pais", "pasaporte", "fecha_ingreso")
CUSTOMER_REQUIRED = ("nombre", "doc_tipo", "regimen_turismo")


def validate_customer_fields(values: Dict[str, Any]) -> None:
    """
    Cross-field rules for a complete customer record.

    Raises:
        BusinessRuleError: tourism data missing, or a RUC document with a wrong check digit.
    """
    if values.get("regimen_turismo"):
        missing = [f for f in TOURISM_FIELDS if not values.get(f)]
        if missing:
            raise BusinessRuleError(
                "Para régimen de turismo debe indicar país, pasaporte y fecha de ingreso",
                details={"missing": missing},
            )
    if values.get("doc_tipo") == "RUC":
        result = fiscal.validate_ruc(values.get("doc_numero"))
        if not result.is_valid:
            raise BusinessRuleError(result.error or "RUC inválido", details={"field": "doc_numero"})


class CustomerService(BaseService):
    """Customers and their vehicles."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.customers = CustomerRepository(session)
        self.vehicles = VehicleRepository(session)

    # Customers
    async def list_customers(self, *, search: Optional[str], limit: int, offset: int) -> List[Customer]:
        return await self.customers.list_customers(search=search, limit=limit, offset=offset)

    async def get_customer(self, customer_id: UUID) -> Customer:
        customer = await self.customers.get_customer(customer_id)
        if not customer:
            raise NotFoundError("Cliente no encontrado")
        return customer

    # PUBLIC_INTERFACE
    async def create_customer(self, payload: CustomerCreate) -> Customer:
        values = payload.model_dump()
        values["email"] = str(payload.email) if payload.email else None
        if values["doc_tipo"] == "RUC":
            values["doc_numero"] = values["doc_numero"].strip()
        validate_customer_fields(values)
        customer = Customer(**values)
        await self.customers.add(customer)
        await self.commit()
        return customer

    # PUBLIC_INTERFACE
    async def update_customer(self, customer_id: UUID, payload: CustomerUpdate) -> Customer:
        """Partial update; the rules are checked against the merged record."""
        customer = await self.get_customer(customer_id)
        changes = payload.model_dump(exclude_unset=True)
        for key in CUSTOMER_REQUIRED:
            if key in changes and changes[key] is None:
                raise BusinessRuleError(f"El campo {key} no puede ser nulo", details={"field": key})
        if "email" in changes and changes["email"] is not None:
            changes["email"] = str(changes["email"])
        merged = {col: getattr(customer, col) for col in ("doc_tipo", "doc_numero", "regimen_turismo", *TOURISM_FIELDS)}
        merged.update(changes)
        validate_customer_fields(merged)
        for key, value in changes.items():
            setattr(customer, key, value)
        await self.commit()
        return customer

    # PUBLIC_INTERFACE
    async def delete_customer(self, customer_id: UUID) -> None:
        """Delete a customer and its vehicles unless work orders or invoices refer to it."""
        customer = await self.get_customer(customer_id)
        if await self.customers.is_referenced(customer_id):
            raise ConflictError("No se puede eliminar el cliente: tiene órdenes de trabajo o ventas asociadas")
        await self.customers.delete(customer)
        await self.commit()

    # Vehicles
    async def list_vehicles(self, *, customer_id: Optional[UUID] = None, limit: int = 100, offset: int = 0) -> List[Vehicle]:
        return await self.vehicles.list_vehicles(customer_id=customer_id, limit=limit, offset=offset)

    async def get_vehicle(self, vehicle_id: UUID) -> Vehicle:
        vehicle = await self.vehicles.get_vehicle(vehicle_id)
        if not vehicle:
            raise NotFoundError("Vehículo no encontrado")
        return vehicle

    async def _ensure_customer_exists(self, customer_id: UUID) -> None:
        if not await self.customers.get_customer(customer_id):
            raise BusinessRuleError("El cliente indicado no existe", details={"customer_id": str(customer_id)})

    # PUBLIC_INTERFACE
    async def create_vehicle(self, payload: VehicleCreate) -> Vehicle:
        await self._ensure_customer_exists(payload.customer_id)
        values = payload.model_dump()
        values["placa"] = values["placa"].strip().upper()
        vehicle = Vehicle(**values)
        await self.vehicles.add(vehicle)
        await self.commit()
        return vehicle

    # PUBLIC_INTERFACE
    async def update_vehicle(self, vehicle_id: UUID, payload: VehicleUpdate) -> Vehicle:
        vehicle = await self.get_vehicle(vehicle_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("customer_id"):
            await self._ensure_customer_exists(changes["customer_id"])
        if changes.get("placa"):
            changes["placa"] = changes["placa"].strip().upper()
        for key, value in changes.items():
            if value is None and key in ("customer_id", "placa", "marca", "modelo"):
                continue
            setattr(vehicle, key, value)
        await self.commit()
        return vehicle

    # PUBLIC_INTERFACE
    async def delete_vehicle(self, vehicle_id: UUID) -> None:
        vehicle = await self.get_vehicle(vehicle_id)
        if await self.vehicles.is_referenced(vehicle_id):
            raise ConflictError("No se puede eliminar el vehículo: tiene órdenes de trabajo asociadas")
        await self.vehicles.delete(vehicle)
        await self.commit()

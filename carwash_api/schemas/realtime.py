from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class WsEnvelope(BaseModel):
    """Envelope for WebSocket messages."""
    type: str = Field(..., description="Message type (e.g., 'metrics.snapshot').")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Message payload.")
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Timestamp (UTC).")
    user_id: Optional[UUID] = Field(default=None, description="Sender user id, if applicable.")


class DashboardMetrics(BaseModel):
    """Snapshot of today's operational figures."""
    ventas_hoy: int = Field(..., description="Invoices issued today")
    ingresos_hoy: Decimal = Field(..., description="Revenue invoiced today")
    ordenes_creadas_hoy: int
    ordenes_entregadas_hoy: int
    ordenes_activas: int = Field(..., description="Work orders not yet delivered or cancelled")
    inventario_bajo: int
    inventario_critico: int
    timbrado_status: Optional[str] = Field(default=None, description="valid | warning | expired, or null when unset")
    timbrado_dias_restantes: Optional[int] = None
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Snapshot timestamp (UTC).")

from __future__ import annotations

import logging
from typing import Dict

from sqlalchemy import delete

from carwash_api.core.logging import audit
from carwash_api.db.models.catalog import Category, Service, ServiceCombo, ServiceComboItem
from carwash_api.db.models.customers import Customer, Vehicle
from carwash_api.db.models.inventory import InventoryItem
from carwash_api.db.models.sales import Sale, SaleItem
from carwash_api.db.models.security import User
from carwash_api.db.models.work_orders import WorkOrder, WorkOrderItem
from carwash_api.services.base import BaseService
from carwash_api.services.dashboard import publish_dashboard_snapshot

logger = logging.getLogger(__name__)

# Children before parents so foreign keys never dangle mid-reset.
RESET_ORDER = (
    SaleItem,
    Sale,
    WorkOrderItem,
    WorkOrder,
    Vehicle,
    Customer,
    ServiceComboItem,
    ServiceCombo,
    Service,
    Category,
    InventoryItem,
)


class AdminService(BaseService):
    """Maintenance operations reserved to administrators."""

    # PUBLIC_INTERFACE
    async def reset_system(self, user: User) -> Dict[str, int]:
        """
        Delete every business record in one transaction.

        Users, company configuration and DNIT configuration are kept.
        Returns the number of rows deleted per table.
        """
        deleted: Dict[str, int] = {}
        for model in RESET_ORDER:
            res = await self.session.execute(delete(model))
            deleted[model.__tablename__] = int(res.rowcount or 0)
        await self.commit()

        logger.warning("System reset by %s", user.username)
        audit("SYSTEM_RESET", user_id=user.id, username=user.username, deleted=deleted)
        await publish_dashboard_snapshot(self.session)
        return deleted

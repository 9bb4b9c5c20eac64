"""
ORM models for the car-wash domain: users, fiscal configuration, catalog,
customers and vehicles, work orders, inventory and sales.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .security import User  # noqa: F401
from .company import (  # noqa: F401
    CompanyConfig,
    DnitConfig,
)
from .catalog import (  # noqa: F401
    Category,
    Service,
    ServiceCombo,
    ServiceComboItem,
)
from .customers import (  # noqa: F401
    Customer,
    Vehicle,
)
from .inventory import InventoryItem  # noqa: F401
from .work_orders import (  # noqa: F401
    WorkOrder,
    WorkOrderItem,
)
from .sales import (  # noqa: F401
    Sale,
    SaleItem,
)

"""Initial car-wash schema.

- users
- company_configs, dnit_configs
- categories, services, service_combos, service_combo_items
- customers, vehicles
- inventory_items
- work_orders, work_order_items
- sales, sale_items
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "c41a7e2d9b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), server_default="user", nullable=False),
        sa.Column("subscription_type", sa.String(20), server_default="free", nullable=False),
        sa.Column("monthly_invoice_limit", sa.Integer(), server_default="50", nullable=False),
        sa.Column("current_month_invoices", sa.Integer(), server_default="0", nullable=False),
        sa.Column("usage_reset_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expiration_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default="1", nullable=False),
        sa.Column("is_blocked", sa.Boolean(), server_default="0", nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("failed_login_attempts", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    op.create_table(
        "company_configs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("ruc", sa.String(20), nullable=False),
        sa.Column("razon_social", sa.String(255), nullable=False),
        sa.Column("nombre_fantasia", sa.String(255), nullable=True),
        sa.Column("timbrado_numero", sa.String(20), nullable=False),
        sa.Column("timbrado_desde", sa.Date(), nullable=False),
        sa.Column("timbrado_hasta", sa.Date(), nullable=False),
        sa.Column("establecimiento", sa.String(3), server_default="001", nullable=False),
        sa.Column("punto_expedicion", sa.String(3), server_default="001", nullable=False),
        sa.Column("direccion", sa.Text(), nullable=False),
        sa.Column("ciudad", sa.String(100), nullable=False),
        sa.Column("telefono", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("logo_path", sa.Text(), nullable=True),
        sa.Column("moneda", sa.String(3), server_default="GS", nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "dnit_configs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("endpoint_url", sa.Text(), nullable=False),
        sa.Column("auth_token", sa.Text(), nullable=False),
        sa.Column("certificate_data", sa.Text(), nullable=True),
        sa.Column("certificate_password", sa.Text(), nullable=True),
        sa.Column("operation_mode", sa.String(20), server_default="testing", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="0", nullable=False),
        sa.Column("last_connection_test", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_connection_status", sa.String(20), nullable=True),
        sa.Column("last_connection_error", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("nombre", sa.String(255), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("tipo", sa.String(20), server_default="ambos", nullable=False),
        sa.Column("color", sa.String(7), nullable=True),
        sa.Column("activa", sa.Boolean(), server_default="1", nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "services",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("nombre", sa.String(255), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("precio", sa.Numeric(12, 2), nullable=False),
        sa.Column("duracion_min", sa.Integer(), nullable=True),
        sa.Column("categoria", sa.String(100), nullable=True),
        sa.Column("activo", sa.Boolean(), server_default="1", nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "service_combos",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("nombre", sa.String(255), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("precio_total", sa.Numeric(12, 2), nullable=False),
        sa.Column("activo", sa.Boolean(), server_default="1", nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "service_combo_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("combo_id", sa.Uuid(), nullable=False),
        sa.Column("service_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["combo_id"], ["service_combos.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["service_id"], ["services.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("combo_id", "service_id", name="uq_service_combo_items_combo_service"),
    )
    op.create_index("ix_service_combo_items_combo_id", "service_combo_items", ["combo_id"])

    op.create_table(
        "customers",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("nombre", sa.String(255), nullable=False),
        sa.Column("doc_tipo", sa.String(20), server_default="CI", nullable=False),
        sa.Column("doc_numero", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("telefono", sa.String(50), nullable=True),
        sa.Column("direccion", sa.Text(), nullable=True),
        sa.Column("regimen_turismo", sa.Boolean(), server_default="0", nullable=False),
        sa.Column("pais", sa.String(100), nullable=True),
        sa.Column("pasaporte", sa.String(50), nullable=True),
        sa.Column("fecha_ingreso", sa.Date(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "vehicles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("customer_id", sa.Uuid(), nullable=False),
        sa.Column("placa", sa.String(20), nullable=False),
        sa.Column("marca", sa.String(50), nullable=False),
        sa.Column("modelo", sa.String(50), nullable=False),
        sa.Column("color", sa.String(30), nullable=True),
        sa.Column("observaciones", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_vehicles_customer_id", "vehicles", ["customer_id"])

    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("nombre", sa.String(255), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("precio", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock_actual", sa.Integer(), server_default="0", nullable=False),
        sa.Column("stock_minimo", sa.Integer(), server_default="0", nullable=False),
        sa.Column("unidad_medida", sa.String(50), server_default="unidad", nullable=False),
        sa.Column("proveedor", sa.String(255), nullable=True),
        sa.Column("ultimo_pedido", sa.Date(), nullable=True),
        sa.Column("categoria", sa.String(100), nullable=True),
        sa.Column("activo", sa.Boolean(), server_default="1", nullable=False),
        sa.Column("estado_alerta", sa.String(10), server_default="normal", nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "work_orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("numero", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=False),
        sa.Column("vehicle_id", sa.Uuid(), nullable=False),
        sa.Column("estado", sa.String(20), server_default="recibido", nullable=False),
        sa.Column("fecha_entrada", sa.DateTime(timezone=True), nullable=False),
        sa.Column("fecha_inicio", sa.DateTime(timezone=True), nullable=True),
        sa.Column("fecha_fin", sa.DateTime(timezone=True), nullable=True),
        sa.Column("fecha_entrega", sa.DateTime(timezone=True), nullable=True),
        sa.Column("observaciones", sa.Text(), nullable=True),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.ForeignKeyConstraint(["vehicle_id"], ["vehicles.id"]),
        sa.UniqueConstraint("numero", name="uq_work_orders_numero"),
    )
    op.create_index("ix_work_orders_customer_id", "work_orders", ["customer_id"])
    op.create_index("ix_work_orders_vehicle_id", "work_orders", ["vehicle_id"])

    op.create_table(
        "work_order_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("work_order_id", sa.Uuid(), nullable=False),
        sa.Column("service_id", sa.Uuid(), nullable=True),
        sa.Column("combo_id", sa.Uuid(), nullable=True),
        sa.Column("nombre", sa.String(255), nullable=False),
        sa.Column("precio", sa.Numeric(12, 2), nullable=False),
        sa.Column("cantidad", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["work_order_id"], ["work_orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["service_id"], ["services.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["combo_id"], ["service_combos.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_work_order_items_work_order_id", "work_order_items", ["work_order_id"])

    op.create_table(
        "sales",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("numero_factura", sa.String(20), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=True),
        sa.Column("work_order_id", sa.Uuid(), nullable=True),
        sa.Column("fecha", sa.DateTime(timezone=True), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("impuestos", sa.Numeric(12, 2), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("medio_pago", sa.String(20), nullable=False),
        sa.Column("regimen_turismo", sa.Boolean(), server_default="0", nullable=False),
        sa.Column("timbrado_usado", sa.String(20), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.ForeignKeyConstraint(["work_order_id"], ["work_orders.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("numero_factura", name="uq_sales_numero_factura"),
    )
    op.create_index("ix_sales_customer_id", "sales", ["customer_id"])

    op.create_table(
        "sale_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("sale_id", sa.Uuid(), nullable=False),
        sa.Column("service_id", sa.Uuid(), nullable=True),
        sa.Column("combo_id", sa.Uuid(), nullable=True),
        sa.Column("inventory_item_id", sa.Uuid(), nullable=True),
        sa.Column("nombre", sa.String(255), nullable=False),
        sa.Column("cantidad", sa.Integer(), nullable=False),
        sa.Column("precio_unitario", sa.Numeric(12, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["sale_id"], ["sales.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["service_id"], ["services.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["combo_id"], ["service_combos.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_sale_items_sale_id", "sale_items", ["sale_id"])


def downgrade() -> None:
    op.drop_index("ix_sale_items_sale_id", table_name="sale_items")
    op.drop_table("sale_items")
    op.drop_index("ix_sales_customer_id", table_name="sales")
    op.drop_table("sales")
    op.drop_index("ix_work_order_items_work_order_id", table_name="work_order_items")
    op.drop_table("work_order_items")
    op.drop_index("ix_work_orders_vehicle_id", table_name="work_orders")
    op.drop_index("ix_work_orders_customer_id", table_name="work_orders")
    op.drop_table("work_orders")
    op.drop_table("inventory_items")
    op.drop_index("ix_vehicles_customer_id", table_name="vehicles")
    op.drop_table("vehicles")
    op.drop_table("customers")
    op.drop_index("ix_service_combo_items_combo_id", table_name="service_combo_items")
    op.drop_table("service_combo_items")
    op.drop_table("service_combos")
    op.drop_table("services")
    op.drop_table("categories")
    op.drop_table("dnit_configs")
    op.drop_table("company_configs")
    op.drop_table("users")

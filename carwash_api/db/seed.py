"""
Database seeding for a fresh installation.

Seeds:
- The initial administrator (ADMIN_USERNAME / ADMIN_PASSWORD settings)
- Default categories for services and products, only when none exist

Usage:
  python -m carwash_api.db.run_migrations upgrade head
  python -m carwash_api.db.seed
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.security import get_password_hash
from carwash_api.core.settings import get_app_settings
from carwash_api.db.models.catalog import Category
from carwash_api.db.models.security import User
from carwash_api.db.session import get_session_maker

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = (
    ("Lavado", "Lavados exteriores e interiores", "servicios", "#3B82F6"),
    ("Detallado", "Pulido, encerado y tratamientos", "servicios", "#8B5CF6"),
    ("Productos de limpieza", "Productos a la venta", "productos", "#10B981"),
    ("Accesorios", "Aromatizantes y accesorios", "ambos", "#F59E0B"),
)


# PUBLIC_INTERFACE
async def seed_all(session: Optional[AsyncSession] = None) -> None:
    """
    Seed the database with the initial administrator and default categories.

    Idempotent: existing rows are left untouched.
    """
    if session is not None:
        await _seed(session)
        return
    async with get_session_maker()() as own_session:
        await _seed(own_session)


async def _seed(session: AsyncSession) -> None:
    await _seed_admin(session)
    await _seed_categories(session)
    await session.commit()


async def _seed_admin(session: AsyncSession) -> None:
    settings = get_app_settings()
    res = await session.execute(select(User).where(User.username == settings.ADMIN_USERNAME))
    if res.scalar_one_or_none():
        logger.info("Admin user already exists")
        return
    session.add(
        User(
            username=settings.ADMIN_USERNAME,
            hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
            full_name=settings.ADMIN_FULL_NAME,
            role="admin",
            subscription_type="enterprise",
            monthly_invoice_limit=999999,
            is_active=True,
            is_blocked=False,
        )
    )
    logger.info("Created initial admin user (username: %s)", settings.ADMIN_USERNAME)


async def _seed_categories(session: AsyncSession) -> None:
    res = await session.execute(select(func.count(Category.id)))
    if int(res.scalar_one() or 0) > 0:
        return
    for nombre, descripcion, tipo, color in DEFAULT_CATEGORIES:
        session.add(Category(nombre=nombre, descripcion=descripcion, tipo=tipo, color=color, activa=True))
    logger.info("Seeded %d default categories", len(DEFAULT_CATEGORIES))


# PUBLIC_INTERFACE
def main() -> None:
    """Console entry point: seed the configured database."""
    asyncio.run(seed_all())


if __name__ == "__main__":
    main()

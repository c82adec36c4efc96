from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from marketplace.models.order import Order, OrderItem


class OrderRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def persist(self, order: Order) -> int:
        # header and items go out in one flush and one commit
        self.session.add(order)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return order.id

    async def get_by_id(self, order_id: int) -> Optional[Order]:
        result = await self.session.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_customer(self, customer_id: int) -> List[Order]:
        result = await self.session.execute(
            select(Order)
            .where(Order.customer_id == customer_id)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_by_vendor(self, vendor_id: int) -> List[Order]:
        """Orders with at least one line fulfilled by ``vendor_id``.

        Only that vendor's lines are loaded into ``Order.items``; the
        returned objects are for reading and must not be flushed back.
        """
        result = await self.session.execute(
            select(Order)
            .where(Order.items.any(OrderItem.vendor_id == vendor_id))
            .options(selectinload(Order.items.and_(OrderItem.vendor_id == vendor_id)))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_all(self, limit: int = 100) -> List[Order]:
        result = await self.session.execute(
            select(Order)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def update_status(self, order: Order, status: str) -> Order:
        order.status = status
        order.updated_at = datetime.now(timezone.utc)
        await self.session.commit()
        return await self.get_by_id(order.id)

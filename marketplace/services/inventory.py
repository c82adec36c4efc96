import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.core.errors import InvalidRequestError, NotFoundError, OutOfStockError
from marketplace.models.product import Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reservation:
    product_id: int
    quantity: int
    unit_price: Decimal
    vendor_id: int


class InventoryLedger:
    """Sole writer of ``Product.stock``.

    Every reservation runs in its own short transaction so that no lock is
    held across the lines of an order. Callers that need several lines to
    succeed together undo earlier reservations with ``release_all``.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self.session_maker = session_maker

    async def reserve(self, product_id: int, quantity: int) -> Reservation:
        if quantity <= 0:
            raise InvalidRequestError(f"Invalid quantity for product {product_id}")

        async with self.session_maker() as session:
            async with session.begin():
                # single conditional decrement; a concurrent reserve either
                # sees the new stock or blocks until this one commits
                result = await session.execute(
                    update(Product)
                    .where(Product.id == product_id, Product.stock >= quantity)
                    .values(stock=Product.stock - quantity)
                    .returning(Product.price, Product.vendor_id)
                    .execution_options(synchronize_session=False)
                )
                row = result.one_or_none()

                if row is None:
                    name = await session.scalar(
                        select(Product.name).where(Product.id == product_id)
                    )
                    if name is None:
                        raise NotFoundError(f"Product {product_id} not found")
                    raise OutOfStockError(f"Insufficient stock for {name}", product_id=product_id)

        logger.debug(f"Reserved {quantity} of product {product_id}")
        return Reservation(
            product_id=product_id,
            quantity=quantity,
            unit_price=Decimal(row.price),
            vendor_id=row.vendor_id
        )

    async def release(self, product_id: int, quantity: int) -> None:
        async with self.session_maker() as session:
            async with session.begin():
                await session.execute(
                    update(Product)
                    .where(Product.id == product_id)
                    .values(stock=Product.stock + quantity)
                    .execution_options(synchronize_session=False)
                )
        logger.info(f"Released {quantity} of product {product_id}")

    async def release_all(self, reservations: Sequence[Reservation]) -> None:
        for reservation in reversed(reservations):
            try:
                await self.release(reservation.product_id, reservation.quantity)
            except Exception as e:
                logger.error(
                    f"Failed to release {reservation.quantity} of product {reservation.product_id}: {e}",
                    exc_info=True
                )

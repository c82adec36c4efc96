from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.core.security import Caller, Role
from marketplace.models import Product


CUSTOMER = Caller(caller_id=1, role=Role.CUSTOMER)
OTHER_CUSTOMER = Caller(caller_id=2, role=Role.CUSTOMER)
VENDOR_A = Caller(caller_id=9, role=Role.VENDOR)
VENDOR_B = Caller(caller_id=7, role=Role.VENDOR)
OUTSIDE_VENDOR = Caller(caller_id=5, role=Role.VENDOR)
ADMIN = Caller(caller_id=100, role=Role.ADMIN)

SHIPPING = {
    "shipping_address": "1 Market Street",
    "shipping_city": "Springfield",
    "shipping_zip": "12345",
    "shipping_country": "US",
    "payment_method": "CARD",
}


def headers_for(caller: Caller) -> dict[str, str]:
    return {"X-User-Id": str(caller.caller_id), "X-User-Role": caller.role.value}


async def stock_of(session_maker: async_sessionmaker[AsyncSession], product_id: int) -> int:
    async with session_maker() as session:
        return await session.scalar(select(Product.stock).where(Product.id == product_id))

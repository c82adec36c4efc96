from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.core.database import get_db, get_session_maker
from marketplace.core.security import Caller, get_caller
from marketplace.repositories.order import OrderRepository
from marketplace.services.inventory import InventoryLedger
from marketplace.services.order import OrderService
from marketplace.schemas.order import OrderCreate, OrderResponse, OrderStatusUpdate

router = APIRouter(prefix="/orders", tags=["orders"])


def get_order_service(
    db: AsyncSession = Depends(get_db),
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker)
) -> OrderService:
    repository = OrderRepository(db)
    ledger = InventoryLedger(session_maker)
    return OrderService(repository, ledger)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    caller: Caller = Depends(get_caller),
    service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    return await service.create_order(caller, order_data)


@router.get("/customer", response_model=List[OrderResponse])
async def get_customer_orders(
    caller: Caller = Depends(get_caller),
    service: OrderService = Depends(get_order_service)
) -> List[OrderResponse]:
    return await service.list_customer_orders(caller)


@router.get("/vendor", response_model=List[OrderResponse])
async def get_vendor_orders(
    caller: Caller = Depends(get_caller),
    service: OrderService = Depends(get_order_service)
) -> List[OrderResponse]:
    return await service.list_vendor_orders(caller)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    caller: Caller = Depends(get_caller),
    service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    return await service.get_order(caller, order_id)


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: int,
    update: OrderStatusUpdate,
    caller: Caller = Depends(get_caller),
    service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    return await service.update_status(caller, order_id, update.status)

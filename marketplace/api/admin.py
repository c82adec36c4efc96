from typing import List
from fastapi import APIRouter, Depends

from marketplace.api.orders import get_order_service
from marketplace.core.security import Caller, get_caller
from marketplace.services.order import OrderService
from marketplace.schemas.order import OrderResponse, OrderStatusUpdate

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/orders", response_model=List[OrderResponse])
async def get_all_orders(
    caller: Caller = Depends(get_caller),
    service: OrderService = Depends(get_order_service)
) -> List[OrderResponse]:
    return await service.list_all_orders(caller)


@router.put("/orders/{order_id}/status", response_model=OrderResponse)
async def override_order_status(
    order_id: int,
    update: OrderStatusUpdate,
    caller: Caller = Depends(get_caller),
    service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    return await service.override_status(caller, order_id, update.status)

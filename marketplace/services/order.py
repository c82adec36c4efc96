import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List

from marketplace.core.config import settings
from marketplace.core.errors import ForbiddenError, InvalidRequestError, NotFoundError
from marketplace.core.security import Caller
from marketplace.models.order import Order, OrderItem, OrderStatus
from marketplace.repositories.order import OrderRepository
from marketplace.schemas.order import OrderCreate, OrderItemResponse, OrderResponse
from marketplace.services import access
from marketplace.services.inventory import InventoryLedger, Reservation

logger = logging.getLogger(__name__)


def generate_order_number() -> str:
    millis = int(time.time() * 1000)
    suffix = uuid.uuid4().hex[:6].upper()
    return f"{settings.order_number_prefix}-{millis}-{suffix}"


def parse_status(status: OrderStatus | str) -> OrderStatus:
    if isinstance(status, OrderStatus):
        return status
    try:
        return OrderStatus(str(status).upper())
    except ValueError:
        raise InvalidRequestError(f"Unknown order status: {status}")


def to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        customer_id=order.customer_id,
        items=[
            OrderItemResponse(
                id=item.id,
                product_id=item.product_id,
                vendor_id=item.vendor_id,
                quantity=item.quantity,
                unit_price=float(item.unit_price),
                line_total=float(item.line_total)
            )
            for item in order.items
        ],
        total_amount=float(order.total_amount),
        shipping_address=order.shipping_address,
        shipping_city=order.shipping_city,
        shipping_zip=order.shipping_zip,
        shipping_country=order.shipping_country,
        payment_method=order.payment_method,
        status=order.status,
        created_at=order.created_at,
        updated_at=order.updated_at
    )


class OrderService:
    def __init__(self, repository: OrderRepository, ledger: InventoryLedger) -> None:
        self.repository = repository
        self.ledger = ledger

    async def create_order(self, caller: Caller, order_data: OrderCreate) -> OrderResponse:
        """Reserve stock for every line, then persist the order.

        Lines are reserved one at a time in request order. If any line
        fails, the order cannot be written, or the call is cancelled before
        the order commits, every reservation made by this call is released
        before the error propagates, so a failed call leaves stock where it
        was and persists nothing.
        """
        if not access.can_place_order(caller.role):
            raise ForbiddenError("Only customers can create orders")
        if not order_data.items:
            raise InvalidRequestError("Order must contain at least one item")

        reservations: List[Reservation] = []
        try:
            for line in order_data.items:
                reservation = await self.ledger.reserve(line.product_id, line.quantity)
                reservations.append(reservation)

                if line.vendor_id is not None and line.vendor_id != reservation.vendor_id:
                    logger.warning(
                        f"Ignoring vendor {line.vendor_id} supplied for product {line.product_id}, "
                        f"product belongs to vendor {reservation.vendor_id}"
                    )

            order_id = await self.repository.persist(self._build_order(caller, order_data, reservations))
        except BaseException as e:
            # CancelledError included; the release runs shielded so a second
            # cancel cannot interrupt it
            logger.warning(
                f"Order rejected for customer {caller.caller_id}, "
                f"releasing {len(reservations)} reservation(s): {type(e).__name__}: {e}"
            )
            await asyncio.shield(self.ledger.release_all(list(reservations)))
            raise

        created_order = await self._load(order_id)
        logger.info(
            f"Order created: {created_order.order_number} "
            f"(id: {created_order.id}, customer: {created_order.customer_id}, total: {created_order.total_amount})"
        )
        return to_response(created_order)

    def _build_order(self, caller: Caller, order_data: OrderCreate, reservations: List[Reservation]) -> Order:
        total_amount = sum(
            (r.unit_price * r.quantity for r in reservations),
            Decimal("0")
        )
        now = datetime.now(timezone.utc)

        return Order(
            order_number=generate_order_number(),
            customer_id=caller.caller_id,
            total_amount=total_amount,
            shipping_address=order_data.shipping_address,
            shipping_city=order_data.shipping_city,
            shipping_zip=order_data.shipping_zip,
            shipping_country=order_data.shipping_country,
            payment_method=order_data.payment_method,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
            items=[
                OrderItem(
                    product_id=r.product_id,
                    vendor_id=r.vendor_id,
                    quantity=r.quantity,
                    unit_price=r.unit_price
                )
                for r in reservations
            ]
        )

    async def get_order(self, caller: Caller, order_id: int) -> OrderResponse:
        order = await self._load(order_id)
        if not access.can_view(order, caller.caller_id, caller.role):
            raise ForbiddenError("You do not have access to this order")
        return to_response(order)

    async def list_customer_orders(self, caller: Caller) -> List[OrderResponse]:
        if not access.can_list_customer_orders(caller.role):
            raise ForbiddenError("Only customers can view their orders")
        orders = await self.repository.list_by_customer(caller.caller_id)
        return [to_response(order) for order in orders]

    async def list_vendor_orders(self, caller: Caller) -> List[OrderResponse]:
        if not access.can_list_vendor_orders(caller.role):
            raise ForbiddenError("Only vendors can view their orders")
        orders = await self.repository.list_by_vendor(caller.caller_id)
        return [to_response(order) for order in orders]

    async def update_status(self, caller: Caller, order_id: int, status: OrderStatus | str) -> OrderResponse:
        order = await self._load(order_id)
        if not access.can_mutate_status(order, caller.caller_id, caller.role):
            raise ForbiddenError("You do not have access to this order")
        new_status = parse_status(status)

        updated = await self.repository.update_status(order, new_status.value)
        logger.info(f"Order updated: {updated.id}, status: {updated.status} (vendor {caller.caller_id})")
        return to_response(updated)

    async def list_all_orders(self, caller: Caller) -> List[OrderResponse]:
        if not access.can_administer(caller.role):
            raise ForbiddenError("Only admins can view all orders")
        orders = await self.repository.list_all(limit=settings.admin_order_list_limit)
        return [to_response(order) for order in orders]

    async def override_status(self, caller: Caller, order_id: int, status: OrderStatus | str) -> OrderResponse:
        if not access.can_administer(caller.role):
            raise ForbiddenError("Only admins can override order status")
        order = await self._load(order_id)
        new_status = parse_status(status)

        updated = await self.repository.update_status(order, new_status.value)
        logger.info(
            "admin_action",
            extra={
                "action": "ORDER_STATUS_UPDATED",
                "admin_id": caller.caller_id,
                "target_type": "Order",
                "target_id": updated.id,
                "description": f"Updated order status to {updated.status}"
            }
        )
        return to_response(updated)

    async def _load(self, order_id: int) -> Order:
        order = await self.repository.get_by_id(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

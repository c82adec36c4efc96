"""Who may see and change orders.

All role and ownership rules for orders live here so that the service and
the HTTP layer ask the same questions. Status is order-wide: a vendor who
owns any line may change the status of the whole order.
"""
from marketplace.core.security import Role
from marketplace.models.order import Order


def _owns_any_line(order: Order, vendor_id: int) -> bool:
    return any(item.vendor_id == vendor_id for item in order.items)


def can_view(order: Order, caller_id: int, role: Role) -> bool:
    if order.customer_id == caller_id:
        return True
    return role == Role.VENDOR and _owns_any_line(order, caller_id)


def can_mutate_status(order: Order, caller_id: int, role: Role) -> bool:
    return role == Role.VENDOR and _owns_any_line(order, caller_id)


def can_place_order(role: Role) -> bool:
    return role == Role.CUSTOMER


def can_list_customer_orders(role: Role) -> bool:
    return role == Role.CUSTOMER


def can_list_vendor_orders(role: Role) -> bool:
    return role == Role.VENDOR


def can_administer(role: Role) -> bool:
    return role == Role.ADMIN

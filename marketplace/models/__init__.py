from marketplace.core.database import Base
from marketplace.models.order import Order, OrderItem, OrderStatus
from marketplace.models.product import Product

__all__ = ["Base", "Order", "OrderItem", "OrderStatus", "Product"]

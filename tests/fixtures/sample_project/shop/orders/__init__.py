from .models import Order, OrderLine, OrderStatus

__all__ = ["Order", "OrderLine", "OrderStatus"]

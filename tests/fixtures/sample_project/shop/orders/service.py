from shop.catalog.models import Product

from .models import Order
from .repository import OrderRepository


class OrderService:
    def __init__(self, repository: OrderRepository):
        self.repository = repository

    def place(self, order_id: str, product: Product) -> Order:
        order = Order(order_id)
        order.add(product)
        self.repository.save(order)
        return order

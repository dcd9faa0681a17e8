from shop.orders import Order

from .models import Invoice, Payment


class BillingService:
    def invoice(self, order: Order) -> Invoice:
        return Invoice(order, order.total())

    def pay(self, invoice: Invoice) -> Payment:
        payment = Payment(invoice)
        payment.settle()
        return payment

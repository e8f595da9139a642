"""Storefront constants, enums and labels."""
from decimal import Decimal
from enum import Enum


class Tables:
    """Backend table names."""
    PRODUCTS = "produtos"
    ORDERS = "pedidos"


# Fixed storage key for the persisted cart
CART_STORAGE_KEY = "mlb_cart"


class OrderStatus(str, Enum):
    """
    Order status lifecycle.

    Flow:
        pending -> paid -> shipped -> delivered
                -> cancelled
    """
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ORDER_STATUS_LABELS: dict[str, str] = {
    OrderStatus.PENDING.value: "Aguardando Pagamento",
    OrderStatus.PAID.value: "Pago",
    OrderStatus.SHIPPED.value: "Enviado",
    OrderStatus.DELIVERED.value: "Entregue",
    OrderStatus.CANCELLED.value: "Cancelado",
}


class PaymentMethod(str, Enum):
    """Payment methods offered at checkout."""
    CREDIT = "credit"
    DEBIT = "debit"
    PIX = "pix"
    BOLETO = "boleto"


PAYMENT_METHOD_LABELS: dict[str, str] = {
    PaymentMethod.CREDIT.value: "Cartao de Credito",
    PaymentMethod.DEBIT.value: "Cartao de Debito",
    PaymentMethod.PIX.value: "PIX",
    PaymentMethod.BOLETO.value: "Boleto Bancario",
}

# Methods that need number/holder/expiry/cvv
CARD_PAYMENT_METHODS: frozenset[str] = frozenset({
    PaymentMethod.CREDIT.value,
    PaymentMethod.DEBIT.value,
})


class ShippingType(str, Enum):
    """Shipping option types."""
    NORMAL = "normal"
    EXPRESS = "express"
    SAME_DAY = "sameday"


# Days added to the submission date per shipping type
DELIVERY_DAYS: dict[str, int] = {
    ShippingType.SAME_DAY.value: 0,
    ShippingType.EXPRESS.value: 3,
    ShippingType.NORMAL.value: 8,
}
DEFAULT_DELIVERY_DAYS = 8

# (type, price, label, estimated time)
SHIPPING_TABLE: tuple[tuple[str, Decimal, str, str], ...] = (
    (ShippingType.NORMAL.value, Decimal("15.90"), "Normal", "5-8 dias"),
    (ShippingType.EXPRESS.value, Decimal("29.90"), "Expresso", "2-3 dias"),
    (ShippingType.SAME_DAY.value, Decimal("49.90"), "Same Day", "Hoje"),
)


class Validation:
    """Form validation limits."""
    MAX_INSTALLMENTS = 12

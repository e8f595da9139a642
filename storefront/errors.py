"""
Error messages and exceptions.

User-facing messages are centralized here (PT-BR, as shown in the store UI)
so routers and services never duplicate the strings.
"""
from typing import Iterable, Optional

# Auth / identity
ERROR_LOGIN_REQUIRED = "Faca login para finalizar a compra"
ERROR_UNAUTHORIZED = "Sessao invalida. Faca login novamente."

# Cart
ERROR_CART_EMPTY = "Seu carrinho esta vazio"
ERROR_PRODUCT_NOT_FOUND = "Produto nao encontrado"
ERROR_PRODUCT_UNAVAILABLE = "Produto indisponivel no momento"
ERROR_CART_ITEM_NOT_FOUND = "Item nao encontrado no carrinho"
ERROR_CART_ID_REQUIRED = "Cabecalho X-Cart-Id obrigatorio"

# Checkout
ERROR_ADDRESS_INCOMPLETE = "Preencha todos os campos obrigatorios do endereco"
ERROR_CARD_INCOMPLETE = "Preencha todos os dados do cartao"
ERROR_INVALID_STEP = "Etapa do checkout invalida"
ERROR_CHECKOUT_NOT_OPEN = "Nenhum checkout em andamento"
ERROR_ORDER_IN_PROGRESS = "Pedido ja esta sendo processado"
ERROR_UNKNOWN_SHIPPING = "Opcao de frete invalida"
ERROR_UNKNOWN_PAYMENT = "Forma de pagamento invalida"
ERROR_INVALID_INSTALLMENTS = "Numero de parcelas invalido"
ERROR_CARD_NOT_ACCEPTED = "Dados de cartao nao se aplicam a esta forma de pagamento"

# Orders / catalog
ERROR_ORDER_CREATE_FAILED = "Erro ao criar pedido. Tente novamente."
ERROR_ORDER_LOAD_FAILED = "Erro ao carregar pedidos"
ERROR_CATALOG_LOAD_FAILED = "Erro ao carregar produtos"

# Success
SUCCESS_CART_ADDED = "Produto adicionado ao carrinho!"
SUCCESS_CART_REMOVED = "removido do carrinho"
SUCCESS_ORDER_CREATED = "Pedido realizado com sucesso!"


class StorefrontError(Exception):
    """Base error carrying a message that can be shown to the shopper."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CheckoutError(StorefrontError):
    """Checkout operation not allowed in the current session state."""


class CheckoutValidationError(CheckoutError):
    """Required address or payment fields are missing."""

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])


class OrderCreationError(StorefrontError):
    """The order backend rejected or never answered the create call."""


class CatalogError(StorefrontError):
    """The product catalog could not be loaded."""

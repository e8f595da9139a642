"""Tests for the checkout flow"""
import asyncio
from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from storefront.checkout import CheckoutSession, CheckoutStep, ensure_can_checkout
from storefront.errors import (
    ERROR_CART_EMPTY,
    ERROR_LOGIN_REQUIRED,
    ERROR_ORDER_CREATE_FAILED,
    CheckoutError,
    CheckoutValidationError,
    OrderCreationError,
)
from storefront.orders import build_order_payload, calculate_delivery_date
from storefront.services.models import Order

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def session(cart, plain_product, order_backend):
    """Session over a cart holding one 100.00 product"""
    cart.add_item(plain_product, 1)
    return CheckoutSession.open(cart, order_backend, clock=lambda: NOW)


@pytest.fixture
def payment_session(session, sample_address):
    """Session already at the payment step"""
    assert session.go_to_payment(sample_address)
    return session


class TestOpenCheckout:

    def test_requires_login(self, cart, plain_product):
        cart.add_item(plain_product)
        with pytest.raises(CheckoutError) as exc:
            ensure_can_checkout(cart, None)
        assert exc.value.message == ERROR_LOGIN_REQUIRED

    def test_requires_items(self, cart, sample_user):
        with pytest.raises(CheckoutError) as exc:
            ensure_can_checkout(cart, sample_user)
        assert exc.value.message == ERROR_CART_EMPTY

    def test_owner_and_idle_tracking(self, cart, order_backend):
        session = CheckoutSession.open(cart, order_backend, clock=lambda: NOW, user_id="user-123")

        assert session.user_id == "user-123"
        assert session.last_active == NOW
        assert session.is_idle_since(NOW + timedelta(minutes=1)) is True
        assert session.is_idle_since(NOW) is False

    def test_defaults(self, session):
        assert session.step == CheckoutStep.ADDRESS
        assert session.shipping.type == "normal"
        assert session.payment.method.value == "credit"
        assert session.payment.installments == 1
        assert session.confirmation is None


class TestAddressStep:

    def test_missing_field_blocks_payment(self, session, sample_address):
        """Every required field but street -> stays at step 1"""
        sample_address["street"] = ""

        assert session.go_to_payment(sample_address) is False
        assert session.step == CheckoutStep.ADDRESS
        assert session.address.missing_fields() == ["street"]

    def test_whitespace_counts_as_empty(self, session, sample_address):
        sample_address["city"] = "   "

        assert session.go_to_payment(sample_address) is False

    def test_complement_is_optional(self, session, sample_address):
        sample_address["complement"] = ""

        assert session.go_to_payment(sample_address) is True
        assert session.step == CheckoutStep.PAYMENT

    def test_back_keeps_selections(self, payment_session):
        payment_session.select_shipping("express")

        assert payment_session.go_to_address() is True
        assert payment_session.step == CheckoutStep.ADDRESS
        assert payment_session.address.street == "Avenida Paulista"
        assert payment_session.shipping.type == "express"

    def test_back_only_from_payment(self, session):
        assert session.go_to_address() is False
        assert session.step == CheckoutStep.ADDRESS


class TestSelections:

    def test_select_shipping_changes_total(self, session):
        assert session.summary().total == session.summary().subtotal + session.shipping.price

        assert session.select_shipping("express") is True
        assert float(session.summary().total) == 129.9

        assert session.select_shipping("sameday") is True
        assert float(session.summary().total) == 149.9

    def test_unknown_shipping_rejected(self, session):
        assert session.select_shipping("drone") is False
        assert session.shipping.type == "normal"

    def test_card_required_only_for_cards(self, session):
        assert session.requires_card_details is True
        session.select_payment_method("debit")
        assert session.requires_card_details is True
        session.select_payment_method("pix")
        assert session.requires_card_details is False
        session.select_payment_method("boleto")
        assert session.requires_card_details is False

    def test_unknown_payment_rejected(self, session):
        assert session.select_payment_method("cheque") is False
        assert session.payment.method.value == "credit"

    def test_installments_credit_only(self, session):
        assert session.set_installments(6) is True
        assert session.payment.installments == 6
        assert session.set_installments(13) is False
        assert session.set_installments(0) is False

        session.select_payment_method("debit")
        assert session.payment.installments == 1
        assert session.set_installments(3) is False

    def test_switching_to_pix_discards_card(self, session, sample_card):
        session.set_card_details(sample_card)
        session.select_payment_method("pix")

        assert session.payment.card.number == ""
        assert session.set_card_details(sample_card) is False

    def test_validate_payment(self, session, sample_card):
        assert session.validate_payment() is False

        session.set_card_details(sample_card)
        assert session.validate_payment() is True

        session.select_payment_method("boleto")
        assert session.validate_payment() is True

    def test_update_payment_applies_all(self, session, sample_card):
        session.update_payment("credit", installments=4, card=sample_card)

        assert session.payment.installments == 4
        assert session.validate_payment() is True

    def test_update_payment_rejects_without_changes(self, session, sample_card):
        """Any invalid part leaves the current selection untouched"""
        session.update_payment("credit", installments=3, card=sample_card)

        for method, installments, card in [
            ("pix", 3, None),
            ("boleto", None, sample_card),
            ("credit", 13, None),
            ("cheque", None, None),
        ]:
            with pytest.raises(CheckoutError):
                session.update_payment(method, installments, card)

        assert session.payment.method.value == "credit"
        assert session.payment.installments == 3
        assert session.payment.card.number == sample_card["number"]

    def test_summary_lines(self, session, sample_product):
        session.cart.add_item(sample_product, 2)

        assert session.summary_lines() == [
            {"quantity": 1, "name": "Camiseta", "total": 100.0},
            {"quantity": 2, "name": "Fone Bluetooth", "total": 80.0},
        ]


class TestSubmitOrder:

    @pytest.mark.asyncio
    async def test_success_clears_cart(self, payment_session, sample_user, order_backend):
        """Accepted order: cart empty, confirmation shown"""
        payment_session.select_shipping("express")
        payment_session.select_payment_method("pix")

        confirmation = await payment_session.submit_order(sample_user)

        assert payment_session.step == CheckoutStep.CONFIRMATION
        assert payment_session.cart.is_empty()
        assert payment_session.is_submitting is False
        assert confirmation.order_number == "ABCDEF12"
        assert confirmation.payment_label == "PIX"
        assert confirmation.delivery_date == date(2026, 10, 22)
        assert confirmation.to_dict()["order_number"] == "#ABCDEF12"
        assert confirmation.total_display == "R$ 129,90"
        order_backend.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_payload_contents(self, payment_session, sample_user, sample_card, order_backend):
        """Payload carries totals and method, never card data"""
        payment_session.set_card_details(sample_card)
        payment_session.set_installments(3)

        await payment_session.submit_order(sample_user)

        payload = order_backend.create.await_args.args[0]
        assert payload["user_id"] == "user-123"
        assert payload["user_email"] == "cliente@test.com"
        assert payload["items"] == [{"product_id": "p2", "name": "Camiseta", "price": 100.0, "quantity": 1}]
        assert payload["shipping"] == {"type": "normal", "price": 15.9, "label": "Normal", "time": "5-8 dias"}
        assert payload["payment"] == {"method": "credit", "installments": 3}
        assert payload["subtotal"] == 100.0
        assert payload["shipping_cost"] == 15.9
        assert payload["total"] == 115.9
        assert "4111" not in str(payload)
        assert "cvv" not in str(payload)

    @pytest.mark.asyncio
    async def test_backend_rejection_keeps_cart(self, payment_session, sample_user, order_backend):
        payment_session.select_payment_method("pix")
        order_backend.create.side_effect = RuntimeError("insert failed")

        with pytest.raises(OrderCreationError) as exc:
            await payment_session.submit_order(sample_user)

        assert exc.value.message == ERROR_ORDER_CREATE_FAILED
        assert payment_session.step == CheckoutStep.PAYMENT
        assert payment_session.cart.get_count() == 1
        assert payment_session.is_submitting is False
        assert payment_session.confirmation is None

    @pytest.mark.asyncio
    async def test_timeout(self, cart, plain_product, sample_address, sample_user):
        async def never_returns(payload):
            await asyncio.sleep(10)

        backend = AsyncMock()
        backend.create = never_returns
        cart.add_item(plain_product)
        session = CheckoutSession.open(cart, backend, timeout=0.01)
        session.go_to_payment(sample_address)
        session.select_payment_method("boleto")

        with pytest.raises(OrderCreationError):
            await session.submit_order(sample_user)

        assert session.step == CheckoutStep.PAYMENT
        assert not cart.is_empty()

    @pytest.mark.asyncio
    async def test_single_submission_in_flight(self, cart, plain_product, sample_address, sample_user, sample_order_row):
        release = asyncio.Event()
        calls = []

        async def slow_create(payload):
            calls.append(payload)
            await release.wait()
            return Order(**sample_order_row)

        backend = AsyncMock()
        backend.create = slow_create
        cart.add_item(plain_product)
        session = CheckoutSession.open(cart, backend)
        session.go_to_payment(sample_address)
        session.select_payment_method("pix")

        first = asyncio.ensure_future(session.submit_order(sample_user))
        await asyncio.sleep(0)
        assert session.is_submitting is True

        with pytest.raises(CheckoutError):
            await session.submit_order(sample_user)

        release.set()
        await first
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_missing_card_data(self, payment_session, sample_user, order_backend):
        with pytest.raises(CheckoutValidationError) as exc:
            await payment_session.submit_order(sample_user)

        assert exc.value.fields == ["number", "holder", "expiry", "cvv"]
        order_backend.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wrong_step(self, session, sample_user):
        with pytest.raises(CheckoutError):
            await session.submit_order(sample_user)

    @pytest.mark.asyncio
    async def test_requires_user(self, payment_session):
        payment_session.select_payment_method("pix")
        with pytest.raises(CheckoutError) as exc:
            await payment_session.submit_order(None)
        assert exc.value.message == ERROR_LOGIN_REQUIRED

    @pytest.mark.asyncio
    async def test_empty_cart(self, payment_session, sample_user):
        payment_session.select_payment_method("pix")
        payment_session.cart.clear()

        with pytest.raises(CheckoutError) as exc:
            await payment_session.submit_order(sample_user)
        assert exc.value.message == ERROR_CART_EMPTY

    @pytest.mark.asyncio
    async def test_confirmation_is_terminal(self, payment_session, sample_user):
        payment_session.select_payment_method("pix")
        await payment_session.submit_order(sample_user)

        assert payment_session.go_to_address() is False
        assert payment_session.go_to_payment() is False
        assert payment_session.step == CheckoutStep.CONFIRMATION

    def test_close_resets(self, payment_session):
        payment_session.select_shipping("express")
        payment_session.close()

        assert payment_session.step == CheckoutStep.ADDRESS
        assert payment_session.shipping.type == "normal"
        assert payment_session.address.street == ""

    def test_to_dict_excludes_card(self, payment_session, sample_card):
        payment_session.set_card_details(sample_card)
        state = payment_session.to_dict()

        assert state["step"] == 2
        assert state["payment"]["requires_card"] is True
        assert "card" not in state["payment"]
        assert state["totals"]["total"] == 115.9


class TestDelivery:

    def test_delivery_offsets(self):
        assert calculate_delivery_date("sameday", NOW) == date(2026, 10, 19)
        assert calculate_delivery_date("express", NOW) == date(2026, 10, 22)
        assert calculate_delivery_date("normal", NOW) == date(2026, 10, 27)
        assert calculate_delivery_date("unknown", NOW) == date(2026, 10, 27)
        assert calculate_delivery_date(None, NOW) == date(2026, 10, 27)

    def test_payload_uses_effective_price(self, sample_user, cart, sample_product):
        cart.add_item(sample_product, 2)
        payload = build_order_payload(
            user=sample_user,
            items=cart.get_items(),
            address={"street": "Rua A"},
            shipping={"type": "express", "price": 29.9, "label": "Expresso", "time": "2-3 dias"},
            payment={"method": "debit"},
        )

        assert payload["items"][0]["price"] == 40.0
        assert payload["subtotal"] == 80.0
        assert payload["total"] == 109.9
        assert payload["payment"] == {"method": "debit", "installments": 1}

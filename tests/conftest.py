"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import Mock, AsyncMock

# Set test environment variables
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test_key")
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")

from storefront.cart import CartManager, CartStorage, MemoryKVClient
from storefront.services.models import AuthUser, Order


@pytest.fixture
def kv_client():
    """In-memory Redis stand-in shared by storages in one test"""
    return MemoryKVClient()


@pytest.fixture
def cart_storage(kv_client):
    return CartStorage(kv_client, key="mlb_cart:test")


@pytest.fixture
def cart(cart_storage):
    """Empty, loaded cart"""
    manager = CartManager(cart_storage)
    manager.load()
    return manager


@pytest.fixture
def sample_product():
    """Catalog product as stored in the produtos table"""
    return {
        "id": "p1",
        "nome": "Fone Bluetooth",
        "descricao": "Fone sem fio",
        "preco": 50.0,
        "precoPromocional": 40.0,
        "imagem": "https://cdn.test/fone.png",
        "categoria": "Eletronicos",
        "estoque": 10,
        "ativo": True,
    }


@pytest.fixture
def plain_product():
    """Product without promotional price"""
    return {
        "id": "p2",
        "nome": "Camiseta",
        "preco": 100.0,
        "precoPromocional": None,
        "imagem": None,
        "estoque": 3,
        "ativo": True,
    }


@pytest.fixture
def sample_user():
    return AuthUser(id="user-123", email="cliente@test.com")


@pytest.fixture
def sample_address():
    return {
        "name": "Maria Silva",
        "phone": "(11) 98765-4321",
        "cep": "01310-100",
        "street": "Avenida Paulista",
        "number": "1000",
        "complement": "Apto 12",
        "neighborhood": "Bela Vista",
        "city": "Sao Paulo",
        "state": "SP",
    }


@pytest.fixture
def sample_card():
    return {
        "number": "4111 1111 1111 1111",
        "holder": "MARIA SILVA",
        "expiry": "12/30",
        "cvv": "123",
    }


@pytest.fixture
def sample_order_row():
    """Order row as returned by the backend after insert"""
    return {
        "id": "abcdef1234567890",
        "user_id": "user-123",
        "user_email": "cliente@test.com",
        "items": [{"product_id": "p2", "name": "Camiseta", "price": 100.0, "quantity": 1}],
        "address": {
            "street": "Avenida Paulista",
            "number": "1000",
            "neighborhood": "Bela Vista",
            "city": "Sao Paulo",
            "state": "SP",
        },
        "shipping": {"type": "express", "price": 29.9, "label": "Expresso", "time": "2-3 dias"},
        "payment": {"method": "pix", "installments": 1},
        "subtotal": 100.0,
        "shipping_cost": 29.9,
        "total": 129.9,
        "status": "pending",
        "created_at": "2026-10-19T12:00:00+00:00",
    }


@pytest.fixture
def order_backend(sample_order_row):
    """Order backend that accepts every order"""
    backend = AsyncMock()
    backend.create = AsyncMock(return_value=Order(**sample_order_row))
    return backend


@pytest.fixture
def mock_supabase_client():
    """Mock async Supabase client; set `table_mock.execute.return_value.data` per test"""
    client = Mock()

    table_mock = Mock()
    table_mock.select.return_value = table_mock
    table_mock.insert.return_value = table_mock
    table_mock.eq.return_value = table_mock
    table_mock.order.return_value = table_mock
    table_mock.limit.return_value = table_mock
    table_mock.execute = AsyncMock(return_value=Mock(data=[]))

    client.table.return_value = table_mock
    client.auth = Mock()
    client.auth.get_user = AsyncMock(return_value=None)

    return client


@pytest.fixture
def mock_database(mock_supabase_client):
    """Database facade over the mocked client"""
    from storefront.services.database import Database
    return Database(mock_supabase_client)

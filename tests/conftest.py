import os
import pytest
from fastapi.testclient import TestClient

# Set test database before any imports
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("LLM_ENABLED", "false")

from app.chat import state_store
from app.config import get_settings
from app.main import create_app
from db.base import Base
from db.session import SessionLocal, engine
from token_risk import get_token_risk_config


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create all tables before tests run, drop after all tests complete."""
    # Import models to ensure they are registered with Base
    from db.models import AgentMemory, BetaApplication, ChatMessage, Todo  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    """Clean tables and in-memory chat state between tests."""
    yield
    from db.models import AgentMemory, BetaApplication, ChatMessage, Todo

    with SessionLocal() as db:
        db.query(ChatMessage).delete()
        db.query(Todo).delete()
        db.query(AgentMemory).delete()
        db.query(BetaApplication).delete()
        db.commit()
    state_store.clear()


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    app = create_app()
    with TestClient(app) as client:
        yield client


@pytest.fixture(autouse=True)
def _configure_llm(monkeypatch, request):
    get_settings.cache_clear()
    get_token_risk_config.cache_clear()
    if request.node.get_closest_marker("use_llm"):
        yield
        return
    monkeypatch.setenv("LLM_ENABLED", "false")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeWallet:
    """In-memory stand-in for SeiWallet."""

    address = "0x1111111111111111111111111111111111111111"
    network = "testnet"
    usdc_address = "0x948dff0c876EbEb1e233f9aF8Df81c23d4E068C6"

    def __init__(self, sei="12.5000", usdc="40.5", usd_price=0.5):
        self.sei = sei
        self.usdc = usdc
        self.usd_price = usd_price
        self.swaps = []
        self.transfers = []
        self.created = []
        self.fail_with = None

    def get_sei_balance(self):
        return {"sei": self.sei, "wei": int(float(self.sei) * 10**18), "usd": float(self.sei) * self.usd_price}

    def get_usdc_balance(self):
        return {"balance": self.usdc, "raw": int(float(self.usdc) * 10**6), "decimals": 6, "token": self.usdc_address}

    def swap_tokens(self, *, token_in, token_out, amount, min_out):
        if self.fail_with:
            raise self.fail_with
        self.swaps.append({"token_in": token_in, "token_out": token_out, "amount": amount, "min_out": min_out})
        return "0x" + "ab" * 32

    def transfer_token(self, amount, recipient, token=None):
        if self.fail_with:
            raise self.fail_with
        self.transfers.append({"amount": amount, "recipient": recipient, "token": token})
        return "0x" + "cd" * 32

    def create_token(self, name, symbol, total_supply):
        self.created.append({"name": name, "symbol": symbol, "total_supply": total_supply})
        return {
            "txHash": "0x" + "ef" * 32,
            "tokenAddress": "0x2222222222222222222222222222222222222222",
            "creationFeeWei": "0",
        }


@pytest.fixture
def fake_wallet():
    return FakeWallet()

import pytest

from app.chat.agent import SeiLLMAgent, advanced_suggestions
from app.config import get_settings
from llm.client import LLMUnavailableError


class FakeClient:
    def __init__(self, reply="Staking SEI earns rewards.", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def chat(self, *, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture()
def llm_on(monkeypatch):
    monkeypatch.setenv("LLM_ENABLED", "true")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_suggestions_follow_keywords():
    assert advanced_suggestions("what should I stake for yield?") == [
        "🏦 Compare protocol APYs",
        "💰 Calculate expected returns",
        "🔒 Check security scores",
    ]
    # several groups match, capped at three
    mixed = advanced_suggestions("swap my portfolio balance")
    assert mixed == [
        "📊 Get detailed portfolio analysis",
        "⚖️ Get rebalancing recommendations",
        "📈 Check performance metrics",
    ]
    assert advanced_suggestions("tell me a joke")[0] == "🚀 Explore DeFi opportunities"


def test_disabled_agent_returns_none(fake_wallet):
    client = FakeClient()
    agent = SeiLLMAgent(client_factory=lambda: client, wallet_provider=lambda: fake_wallet)
    assert agent.process_message("what is the best yield?") is None
    assert client.prompts == []


@pytest.mark.use_llm
def test_agent_reply_carries_wallet_state(llm_on, fake_wallet):
    client = FakeClient()
    agent = SeiLLMAgent(client_factory=lambda: client, wallet_provider=lambda: fake_wallet)

    result = agent.process_message("should I stake?")

    assert result.message == "Staking SEI earns rewards."
    assert result.confidence == 0.95
    assert result.suggestions[0] == "🏦 Compare protocol APYs"
    assert "SEI Balance: 12.5000 SEI ($6.25)" in result.data["walletInfo"]
    assert "WALLET STATUS" in client.prompts[0]["system"]
    assert client.prompts[0]["user"] == "should I stake?"


@pytest.mark.use_llm
def test_agent_provider_failure_returns_none(llm_on, fake_wallet):
    client = FakeClient(error=LLMUnavailableError("timeout"))
    agent = SeiLLMAgent(client_factory=lambda: client, wallet_provider=lambda: fake_wallet)
    assert agent.process_message("should I stake?") is None


def test_wallet_info_reports_fetch_errors():
    def broken_wallet():
        raise RuntimeError("SEI_PRIVATE_KEY is not set")

    agent = SeiLLMAgent(client_factory=FakeClient, wallet_provider=broken_wallet)
    assert agent.wallet_info() == "WALLET INFO: Unable to fetch (SEI_PRIVATE_KEY is not set)"

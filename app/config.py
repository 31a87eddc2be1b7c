from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # storage
    database_url: str = "sqlite:///./seifun.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout_s: int = 30
    db_pool_recycle_s: int = 1800

    # logging
    log_level: str = "INFO"
    log_json: bool = False

    # llm
    llm_enabled: bool = True
    llm_provider: str = "openai"
    llm_model: str = "gpt-4o-mini"  # safe default- override via env
    agent_model: str = "gpt-4"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 1200
    llm_timeout_s: int = 30
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("OPENAI_API_KEY", "VITE_OPENAI_API_KEY", "openai_api_key"),
    )

    langsmith_tracing: bool = False
    langsmith_api_key: str = ""
    langsmith_project: str = "seifun-agent"
    langsmith_endpoint: str = "https://api.smith.langchain.com"

    # sei chain
    sei_network: str = "testnet"
    rpc_url_mainnet: str = "https://evm-rpc.sei-apis.com"
    rpc_url_testnet: str = "https://evm-rpc-testnet.sei-apis.com"
    sei_private_key: str = ""
    sei_block_time_s: float = 0.4
    max_log_block_range: int = 2000

    # tokens
    usdc_testnet: str = Field(
        default="0x948dff0c876EbEb1e233f9aF8Df81c23d4E068C6",
        validation_alias=AliasChoices("VITE_USDC_TESTNET", "USDC_TESTNET", "usdc_testnet"),
    )
    usdc_mainnet: str = "0x3894085Ef7Ff0f0aeDf52E2A2704928d1Ec074F1"
    wsei_mainnet: str = "0xE30feDd158A2e3b13e9badaeABaFc5516e95e8C7"
    wsei_testnet: str = "0x027D2E627209f1cebA52ADc8A5aFE9318459b44B"

    # dex / swaps
    dex_name: str = "DragonSwap"
    dex_router_address: str = ""
    swap_slippage_bps: int = 100
    swap_max_price_impact_pct: float = 5.0
    swap_deadline_seconds: int = 600
    swap_fixed_usdc_per_sei: float = 0.0

    # token factory
    token_factory_address: str = ""

    # pricing
    price_feed_url: str = "https://api.coingecko.com/api/v3/simple/price?ids=sei-network&vs_currencies=usd"
    sei_usd_fallback: float = 0.0
    http_timeout_s: int = 10

    # chat
    chat_state_ttl_seconds: int = 1800
    chat_history_limit: int = 200

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def DATABASE_URL(self) -> str:
        return self.database_url

    @property
    def LLM_MODEL(self) -> str:
        return self.llm_model

    @property
    def LLM_ENABLED(self) -> bool:
        return self.llm_enabled

    @property
    def LLM_PROVIDER(self) -> str:
        return self.llm_provider

    @property
    def OPENAI_API_KEY(self) -> str:
        return self.openai_api_key

    @property
    def llm_available(self) -> bool:
        return bool(self.llm_enabled and self.openai_api_key)

    def usdc_address(self, network: str) -> str:
        return self.usdc_testnet if network == "testnet" else self.usdc_mainnet

    def wsei_address(self, network: str) -> str:
        return self.wsei_testnet if network == "testnet" else self.wsei_mainnet


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader (process-level).
    """
    return Settings()

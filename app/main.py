from fastapi import FastAPI

from api.v1 import beta, chat, intent, risk, swap, todos, wallet
from app.config import get_settings
from app.core.langsmith import configure_langsmith
from app.core.logging import configure_logging
from app.core.middleware import SessionContextMiddleware


def create_app() -> FastAPI:
    configure_logging()
    configure_langsmith()

    app = FastAPI(title="Seifun Agent Service", version="0.1.0")
    app.add_middleware(SessionContextMiddleware)

    for module in (intent, risk, wallet, swap, chat, todos, beta):
        app.include_router(module.router, prefix="/v1")

    @app.get("/healthz")
    async def healthz():
        s = get_settings()
        return {
            "ok": True,
            "network": s.sei_network,
            "llm_model": s.LLM_MODEL,
            "llm_available": s.llm_available,
            "db_configured": bool(s.DATABASE_URL),
            "wallet_configured": bool(s.sei_private_key),
            "router_configured": bool(s.dex_router_address),
            "fixed_rate_configured": s.swap_fixed_usdc_per_sei > 0,
        }

    return app


app = create_app()

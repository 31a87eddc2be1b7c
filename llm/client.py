from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict

from app.config import get_settings
from llm.prompts import SWAP_PLAN_TOOL, SWAP_PLAN_TOOL_NAME, build_intent_parse_prompt

logger = logging.getLogger(__name__)

EXECUTION_MODES = ("preview", "execute", "auto")


class LLMUnavailableError(RuntimeError):
    pass


class LLMClient:
    def __init__(
        self,
        *,
        model: str | None = None,
        provider: str | None = None,
        api_key: str | None = None,
        temperature: float = 0.0,
        timeout_s: int = 30,
        max_tokens: int | None = None,
    ) -> None:
        self.model = model
        self.provider = provider
        self.api_key = api_key
        self.temperature = temperature
        self.timeout_s = timeout_s
        self.max_tokens = max_tokens

    def chat(self, *, prompt: dict) -> str:
        return self._call_provider(prompt=prompt)

    def parse_swap_intent(self, message: str) -> Dict[str, Any]:
        """
        Function-call the model with build_swap_plan and return the validated plan.

        Raises LLMUnavailableError when the provider cannot be called and
        ValueError when no usable intent comes back.
        """
        prompt = build_intent_parse_prompt(message)
        raw_args = self._call_tool(prompt=prompt)
        return normalize_swap_plan(raw_args)

    def _call_provider(self, *, prompt: dict) -> str:
        if self.provider == "openai":
            return self._call_openai(prompt=prompt)
        raise LLMUnavailableError("LLM provider not configured")

    def _chat_model(self, **kwargs):
        if not self.api_key:
            raise LLMUnavailableError("OPENAI_API_KEY is not set")
        try:
            from langchain_openai import ChatOpenAI
        except Exception as e:
            raise LLMUnavailableError(f"LangChain OpenAI client not available: {e}") from e

        return ChatOpenAI(
            model=self.model or "gpt-4o-mini",
            temperature=self.temperature,
            timeout=self.timeout_s,
            api_key=self.api_key,
            max_tokens=self.max_tokens,
            **kwargs,
        )

    @staticmethod
    def _messages(prompt: dict) -> list:
        from langchain_core.messages import HumanMessage, SystemMessage

        return [
            SystemMessage(content=prompt["system"]),
            HumanMessage(content=prompt["user"]),
        ]

    def _call_openai(self, *, prompt: dict) -> str:
        logger.info("LLM call start provider=openai model=%s", self.model or "gpt-4o-mini")
        try:
            response = self._chat_model().invoke(self._messages(prompt))
        except LLMUnavailableError:
            raise
        except Exception as e:
            raise LLMUnavailableError(f"OpenAI call failed: {e}") from e

        output_text = response.content
        if not output_text:
            raise LLMUnavailableError("OpenAI returned empty content")
        if not isinstance(output_text, str):
            output_text = json.dumps(output_text)
        logger.info("LLM call success provider=openai output_len=%s", len(output_text))
        return output_text

    def _call_tool(self, *, prompt: dict) -> Dict[str, Any]:
        if self.provider != "openai":
            raise LLMUnavailableError("LLM provider not configured")

        logger.info("LLM tool call start provider=openai tool=%s", SWAP_PLAN_TOOL_NAME)
        llm = self._chat_model()
        try:
            bound = llm.bind_tools([SWAP_PLAN_TOOL], tool_choice=SWAP_PLAN_TOOL_NAME)
            response = bound.invoke(self._messages(prompt))
        except Exception as e:
            raise LLMUnavailableError(f"OpenAI call failed: {e}") from e

        for call in getattr(response, "tool_calls", None) or []:
            if call.get("name") == SWAP_PLAN_TOOL_NAME:
                return dict(call.get("args") or {})
        logger.warning("LLM returned no %s call", SWAP_PLAN_TOOL_NAME)
        return {}


def normalize_swap_plan(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deterministic light validator over the model's function arguments.
    """
    slippage = raw.get("maxSlippagePct")
    if isinstance(slippage, bool) or not isinstance(slippage, (int, float)) or not math.isfinite(slippage):
        slippage = 0.5

    mode = raw.get("executionMode")
    if mode not in EXECUTION_MODES:
        mode = "preview"

    plan = {
        "intent": str(raw.get("intent") or "").lower(),
        "fromToken": raw.get("fromToken") or None,
        "toToken": raw.get("toToken") or None,
        "amount": str(raw.get("amount") or ""),
        "maxSlippagePct": float(slippage),
        "preferredDex": raw.get("preferredDex") or "DragonSwap",
        "executionMode": mode,
        "gasPreference": raw.get("gasPreference") or "balanced",
    }
    if not plan["intent"] or not plan["amount"]:
        raise ValueError("Unable to parse intent")
    return plan


def get_llm_client(*, model: str | None = None, temperature: float | None = None) -> LLMClient:
    settings = get_settings()
    return LLMClient(
        model=model or settings.LLM_MODEL,
        provider=settings.LLM_PROVIDER,
        api_key=settings.OPENAI_API_KEY,
        temperature=settings.llm_temperature if temperature is None else temperature,
        timeout_s=settings.llm_timeout_s,
        max_tokens=settings.llm_max_tokens,
    )

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_DOWN

from app.config import get_settings

USDC_QUANT = Decimal("0.000001")
SEI_QUANT = Decimal("0.000001")


class FixedRateUnavailableError(RuntimeError):
    pass


def _rate() -> Decimal:
    rate = Decimal(str(get_settings().swap_fixed_usdc_per_sei))
    if rate <= 0:
        raise FixedRateUnavailableError("fixed SEI/USDC rate is not configured")
    return rate


def _positive(amount: str | float) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"invalid amount: {amount}") from exc
    if not value.is_finite() or value <= 0:
        raise ValueError(f"amount must be positive: {amount}")
    return value


def quote_sei_to_usdc(sei_amount: str | float) -> Decimal:
    return (_positive(sei_amount) * _rate()).quantize(USDC_QUANT, rounding=ROUND_DOWN)


def quote_usdc_to_sei(usdc_amount: str | float) -> Decimal:
    return (_positive(usdc_amount) / _rate()).quantize(SEI_QUANT, rounding=ROUND_DOWN)


def fixed_quote(*, sei_amount: str | None = None, usdc_amount: str | None = None) -> dict[str, str]:
    """
    Quote at the configured fixed rate. Exactly one side must be given.
    """
    if (sei_amount is None) == (usdc_amount is None):
        raise ValueError("provide exactly one of seiAmount or usdcAmount")
    if sei_amount is not None:
        return {"outUsdc": str(quote_sei_to_usdc(sei_amount))}
    return {"outSei": str(quote_usdc_to_sei(usdc_amount))}

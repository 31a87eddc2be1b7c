from __future__ import annotations

import re

_SWAP_YES_RE = re.compile(r"^(yes|y|confirm|proceed|go ahead|do it|ok|okay)\b")
_SWAP_NO_RE = re.compile(r"^(no|n|cancel|stop|abort|not now)\b")

_TRANSFER_CONFIRM_RES = [
    re.compile(p)
    for p in (r"^yes$", r"^y$", r"^confirm$", r"^yes.*confirm", r"^confirm.*yes", r"^go.*ahead", r"^proceed", r"^send.*it")
]
_TRANSFER_CANCEL_RES = [
    re.compile(p)
    for p in (r"^no$", r"^n$", r"^cancel$", r"^abort", r"^stop", r"^never.*mind", r"^don.*t.*send")
]


def _normalize(message: str) -> str:
    return message.lower().strip()


def is_swap_confirm(message: str) -> bool:
    return bool(_SWAP_YES_RE.search(_normalize(message)))


def is_swap_cancel(message: str) -> bool:
    return bool(_SWAP_NO_RE.search(_normalize(message)))


def is_transfer_confirm(message: str) -> bool:
    text = _normalize(message)
    return any(p.search(text) for p in _TRANSFER_CONFIRM_RES)


def is_transfer_cancel(message: str) -> bool:
    text = _normalize(message)
    return any(p.search(text) for p in _TRANSFER_CANCEL_RES)

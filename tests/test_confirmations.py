from __future__ import annotations

import pytest

from app.chat.confirmations import (
    is_swap_cancel,
    is_swap_confirm,
    is_transfer_cancel,
    is_transfer_confirm,
)


@pytest.mark.parametrize("message", ["yes", "Y", "confirm", "go ahead please", "ok", "Okay!", "do it"])
def test_swap_confirm_patterns(message):
    assert is_swap_confirm(message)


@pytest.mark.parametrize("message", ["no", "cancel", "stop that", "abort", "not now"])
def test_swap_cancel_patterns(message):
    assert is_swap_cancel(message)


def test_swap_patterns_are_anchored():
    assert not is_swap_confirm("yesterday was fun")
    assert not is_swap_cancel("nothing")
    assert not is_swap_confirm("I said yes")


@pytest.mark.parametrize("message", ["yes", "y", "confirm", "yes I confirm", "go ahead", "proceed", "send it"])
def test_transfer_confirm_patterns(message):
    assert is_transfer_confirm(message)


@pytest.mark.parametrize("message", ["no", "n", "cancel", "abort", "stop", "never mind", "don't send"])
def test_transfer_cancel_patterns(message):
    assert is_transfer_cancel(message)


def test_transfer_confirm_is_stricter_than_swap():
    # "ok" confirms a swap but not a transfer
    assert is_swap_confirm("ok")
    assert not is_transfer_confirm("ok")
    assert not is_transfer_confirm("yes please")

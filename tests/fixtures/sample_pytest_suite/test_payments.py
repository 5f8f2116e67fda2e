"""Payment tests for the sample pytest suite fixture."""
from __future__ import annotations

import pytest


@pytest.mark.parametrize("currency", ["EUR", "USD"])
def test_refund(currency: str) -> None:
    """Refunds are issued in the original currency."""
    refund = {"amount": 10, "currency": currency}
    assert refund["currency"] == currency


def test_charge_card() -> None:
    charged = {"card": "4111", "amount": 25}
    assert charged["amount"] == 25

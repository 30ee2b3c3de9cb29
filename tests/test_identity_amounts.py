from __future__ import annotations

import pytest

from fundledger.ledger.constants import MAX_AMOUNT_DIGITS
from fundledger.ledger.identity import AMOUNT_LIMIT, Identity, as_amount, require_positive
from fundledger.runtime.errors import InvalidAmount, InvalidIdentity


def test_identity_parse_compares_by_value() -> None:
    a = Identity.parse("addr1")
    assert a == Identity("addr1")
    assert str(a) == "addr1"
    assert Identity.parse(a) is a
    assert sorted([Identity("b"), Identity("a")]) == [Identity("a"), Identity("b")]


@pytest.mark.parametrize("bad", ["", "   ", " addr1", "addr1 ", "has space", "x" * 129, "tab\there", None, 42])
def test_identity_rejects_malformed(bad) -> None:
    with pytest.raises(InvalidIdentity) as e:
        Identity.parse(bad)
    assert e.value.code == "invalid_identity"


def test_as_amount_accepts_ints_and_digit_strings() -> None:
    assert as_amount(0) == 0
    assert as_amount("12345") == 12345
    # arbitrary precision, beyond u128
    big = 2**200
    assert as_amount(str(big)) == big


@pytest.mark.parametrize("bad", [-1, "-5", "1.5", 1.5, True, None, "abc", "²"])
def test_as_amount_rejects_non_amounts(bad) -> None:
    with pytest.raises(InvalidAmount):
        as_amount(bad)


def test_require_positive_rejects_zero() -> None:
    assert require_positive(3) == 3
    with pytest.raises(InvalidAmount) as e:
        require_positive(0)
    assert e.value.reason == "amount_must_be_positive"


def test_as_amount_accepts_values_up_to_max_digits() -> None:
    top = "9" * MAX_AMOUNT_DIGITS
    assert as_amount(top) == AMOUNT_LIMIT - 1
    assert as_amount(AMOUNT_LIMIT - 1) == AMOUNT_LIMIT - 1


@pytest.mark.parametrize("big", ["9" * 5000, "1" + "0" * MAX_AMOUNT_DIGITS, 10**5000, AMOUNT_LIMIT], ids=["str_5000_nines", "str_max_digits_plus_one", "int_10_pow_5000", "amount_limit"])
def test_as_amount_rejects_oversized_values(big) -> None:
    with pytest.raises(InvalidAmount) as e:
        as_amount(big)
    assert e.value.reason == "amount_too_large"
    assert e.value.details["max_digits"] == MAX_AMOUNT_DIGITS


def test_as_amount_rejects_oversized_negative_int() -> None:
    with pytest.raises(InvalidAmount) as e:
        as_amount(-(10**5000))
    assert e.value.reason == "amount_too_large"

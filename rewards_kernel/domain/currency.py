"""
Currency -- cent-exact money arithmetic and Brazilian real formatting.

Responsibility:
    All monetary math in the system is performed on integer cents.  Decimal
    major-unit values (reais) only exist at the I/O boundary: parsing what a
    user or administrator typed, and formatting for display.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Leaf module; imported
    by the reward engine, the goal service and the ORM adapters.

Invariants enforced:
    - No binary floating point in any sum: every operand is converted to
      integer cents first (``sum_amounts``).
    - Rounding is ROUND_HALF_UP on Decimal, i.e. half away from zero.
    - Valid amounts lie in [MIN_VALUE, MAX_VALUE]; ``is_valid_amount``
      rejects values outside, it never clamps.

Failure modes:
    - ``to_cents`` raises ValueError for NaN/infinite input and TypeError
      for unsupported types.
    - ``parse_currency`` and the formatters never raise; unparsable input
      degrades to zero because they sit on interactive form paths.

Usage:
    from rewards_kernel.domain.currency import format_currency, to_cents

    to_cents("45.005")                 # 4501
    format_currency(4500, from_cents=True)   # "R$ 45,00"
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS_PER_UNIT = 100
CURRENCY_CODE = "BRL"
CURRENCY_PREFIX = "R$"

MIN_VALUE = Decimal("0")
MAX_VALUE = Decimal("999999.99")
MAX_CENTS = 99_999_999

# Plain-number inputs above this are treated as already-scaled cents
LEGACY_CENTS_THRESHOLD = Decimal("999999")

ZERO = Decimal("0.00")
_CENT = Decimal("0.01")
_ONE = Decimal("1")
_TENTH = Decimal("0.1")

_NON_NUMERIC = re.compile(r"[^\d.,]")
_INPUT_PATTERN = re.compile(r"[\d.,]+")
_SIMPLE_NUMBER = re.compile(r"\d+(\.\d{1,2})?")
_LEADING_NUMBER = re.compile(r"\d*(?:\.\d*)?")

Amount = Decimal | int | float | str


def _coerce(amount: Amount) -> Decimal:
    """Convert a supported operand to Decimal without going through binary float math."""
    if isinstance(amount, bool):
        raise TypeError("bool is not a monetary amount")
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, int):
        return Decimal(amount)
    if isinstance(amount, float):
        # repr() is the shortest string that round-trips, so 0.1 -> "0.1"
        return Decimal(repr(amount))
    if isinstance(amount, str):
        return Decimal(amount.strip())
    raise TypeError(f"Unsupported amount type: {type(amount).__name__}")


def to_cents(amount: Amount) -> int:
    """
    Convert a major-unit amount to integer cents.

    Rounds to the nearest cent, half away from zero.

    Raises:
        ValueError: If the amount is not a finite number.
        TypeError: If the amount type is not supported.
    """
    try:
        value = _coerce(amount)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return int((value * CENTS_PER_UNIT).quantize(_ONE, rounding=ROUND_HALF_UP))


def to_decimal(cents: int) -> Decimal:
    """Convert integer cents to an exact two-place Decimal (``cents / 100``)."""
    return Decimal(int(cents)).scaleb(-2)


def sum_amounts(amounts: Iterable[Amount]) -> Decimal:
    """Sum major-unit amounts through integer cents."""
    return to_decimal(sum(to_cents(a) for a in amounts))


def sum_cents(cents: Iterable[int]) -> int:
    """Sum cent values, rejecting anything that is not an integer."""
    total = 0
    for value in cents:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Cent values must be int, got {type(value).__name__}")
        total += value
    return total


def round_ratio_to_cents(ratio: Decimal, cents: int) -> int:
    """``round(ratio * cents)`` half away from zero."""
    return int((ratio * Decimal(cents)).quantize(_ONE, rounding=ROUND_HALF_UP))


def _leading_number(text: str) -> Decimal | None:
    """Longest numeric prefix of ``text``, or None if it has no digits."""
    match = _LEADING_NUMBER.match(text)
    prefix = match.group(0) if match else ""
    if not any(ch.isdigit() for ch in prefix):
        return None
    if prefix.endswith("."):
        prefix = prefix[:-1]
    if prefix.startswith("."):
        prefix = "0" + prefix
    return Decimal(prefix)


def parse_currency(raw: str) -> Decimal:
    """
    Parse user input into a major-unit Decimal.

    Accepts ``"1.234,56"``, ``"R$ 45,00"``, ``"1234,5"``, ``"12.50"`` and
    ``"1.234.567"``.  Everything except digits, ``.`` and ``,`` is stripped
    first.  With a single comma the Brazilian form is assumed (dots are
    thousands separators, at most two fractional digits are kept).
    Otherwise the input is a plain number; a plain number above 999,999 is
    taken to be cents already and divided by 100.

    Never raises: unparsable input returns ``Decimal("0.00")``.
    """
    if not raw or not isinstance(raw, str):
        return ZERO

    cleaned = _NON_NUMERIC.sub("", raw)

    if "," in cleaned:
        parts = cleaned.split(",")
        if len(parts) == 2:
            integer_part = parts[0].replace(".", "")
            decimal_part = parts[1][:2]
            value = _leading_number(f"{integer_part}.{decimal_part}")
            if value is None:
                return ZERO
            return value.quantize(_CENT, rounding=ROUND_HALF_UP)

    if _SIMPLE_NUMBER.fullmatch(cleaned):
        value = Decimal(cleaned)
    else:
        value = _leading_number(cleaned.replace(".", ""))
        if value is None:
            return ZERO

    if value > LEGACY_CENTS_THRESHOLD:
        value = value / CENTS_PER_UNIT

    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def _group_thousands(integer_digits: str) -> str:
    return f"{int(integer_digits):,}".replace(",", ".")


def format_currency(amount: Amount, from_cents: bool = False) -> str:
    """
    Format an amount as ``R$ 1.234,56``.

    With ``from_cents=True`` the amount is an integer number of cents.
    Invalid input renders as ``R$ 0,00``.
    """
    try:
        value = to_decimal(int(amount)) if from_cents else _coerce(amount)
        if not value.is_finite():
            value = ZERO
    except (TypeError, ValueError, InvalidOperation):
        value = ZERO

    rounded = value.quantize(_CENT, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    integer_digits, _, fraction = f"{abs(rounded):f}".partition(".")
    return f"{sign}{CURRENCY_PREFIX} {_group_thousands(integer_digits)},{fraction}"


def format_currency_compact(amount: Amount, from_cents: bool = False) -> str:
    """
    Compact display form: ``R$ 1,2K`` from 1,000 and ``R$ 1,5M`` from 1,000,000.

    Below 1,000 this is ``format_currency``.
    """
    try:
        value = to_decimal(int(amount)) if from_cents else _coerce(amount)
        if not value.is_finite():
            value = ZERO
    except (TypeError, ValueError, InvalidOperation):
        value = ZERO

    for threshold, suffix in ((Decimal(1_000_000), "M"), (Decimal(1_000), "K")):
        if value >= threshold:
            scaled = (value / threshold).quantize(_TENTH, rounding=ROUND_HALF_UP)
            return f"{CURRENCY_PREFIX} {str(scaled).replace('.', ',')}{suffix}"
    return format_currency(value)


def is_valid_amount(value: object) -> bool:
    """
    Validation predicate for form input.

    Empty input is valid (the field may be left blank).  Strings may carry
    the ``R$`` prefix but otherwise only digits and separators.  Anything
    outside [MIN_VALUE, MAX_VALUE] is rejected.
    """
    if value is None or value == "":
        return True
    if isinstance(value, bool):
        return False

    if isinstance(value, str):
        text = value.strip()
        if text.startswith(CURRENCY_PREFIX):
            text = text[len(CURRENCY_PREFIX):].strip()
        if not _INPUT_PATTERN.fullmatch(text):
            return False
        amount = parse_currency(text)
    else:
        try:
            amount = _coerce(value)  # type: ignore[arg-type]
        except (TypeError, ValueError, InvalidOperation):
            return False

    if not amount.is_finite():
        return False
    return MIN_VALUE <= amount <= MAX_VALUE


def is_valid_cents(cents: int) -> bool:
    """True if ``cents`` is an int within [0, MAX_CENTS]."""
    if isinstance(cents, bool) or not isinstance(cents, int):
        return False
    return 0 <= cents <= MAX_CENTS


def calculate_percentage(value: Amount, total: Amount) -> int:
    """Whole-number percentage of ``value`` over ``total``; 0 when total is 0."""
    total_dec = _coerce(total)
    if total_dec == 0:
        return 0
    ratio = _coerce(value) / total_dec * 100
    return int(ratio.quantize(_ONE, rounding=ROUND_HALF_UP))

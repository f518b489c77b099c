import re
from decimal import Decimal, InvalidOperation

_NON_NUMERIC = re.compile(r"[^0-9.]")

Number = int | float | Decimal


def parse_leniently(value: object) -> Number | None:
    """
    Extract a number from seller-entered text such as "$1,200.50" or "12kg".

    Numbers pass through unchanged. Text is stripped of everything but digits
    and decimal points and parsed as a Decimal. Anything that does not yield a
    valid number returns None; this function never raises, call sites pick
    their own default.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return value
    if not isinstance(value, str):
        return None

    cleaned = _NON_NUMERIC.sub("", value)
    if not cleaned:
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None

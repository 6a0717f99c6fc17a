"""Exact conversion of human-readable amounts into smallest-denomination integers."""

from __future__ import annotations

import re
from typing import Optional

from zora_mcp.errors import ValidationError
from zora_mcp.zora_api.platform import LegKind

NATIVE_DECIMALS = 18
DEFAULT_TOKEN_DECIMALS = 18
MAX_DECIMALS = 36

AMOUNT_REGEX = re.compile(r"^(?P<whole>\d*)(?:\.(?P<fraction>\d*))?$")


def normalize_amount(
    amount: str,
    kind: LegKind,
    decimals: Optional[int] = None,
    *,
    field: str = "amount",
) -> int:
    """
    Convert a decimal string such as ``"0.01"`` into an integer amount.

    The native coin always uses 18 decimals. Token legs use ``decimals`` when
    given and fall back to 18, which is wrong for tokens with other
    precisions unless the caller supplies it.

    Raises:
        ValidationError: on malformed input or when the amount has more
            significant fractional digits than the precision allows.
    """
    if kind is LegKind.ETH:
        precision = NATIVE_DECIMALS
    else:
        precision = DEFAULT_TOKEN_DECIMALS if decimals is None else decimals
    if not 0 <= precision <= MAX_DECIMALS:
        raise ValidationError("decimals", f"must be between 0 and {MAX_DECIMALS}")

    if not isinstance(amount, str):
        raise ValidationError(field, "must be a decimal string")
    match = AMOUNT_REGEX.fullmatch(amount.strip())
    if match is None:
        raise ValidationError(field, "must be a non-negative decimal number like '0.01'")
    whole = match.group("whole") or ""
    fraction = (match.group("fraction") or "").rstrip("0")
    if not whole and not match.group("fraction"):
        raise ValidationError(field, "must contain at least one digit")

    if len(fraction) > precision:
        raise ValidationError(field, f"has more than {precision} decimal places")

    return int(whole or "0") * 10**precision + int(fraction.ljust(precision, "0") or "0")

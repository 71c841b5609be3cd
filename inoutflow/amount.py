"""Wei amount helpers."""

from __future__ import annotations

from decimal import Decimal, localcontext

NATIVE_DECIMALS = 18
MAX_UINT256 = 2**256 - 1


def parse_uint256(value: object) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise ValueError(f"Not a decimal amount: {value!r}")
        amount = int(text)
    else:
        raise ValueError(f"Not an amount: {value!r}")
    if amount < 0 or amount > MAX_UINT256:
        raise ValueError(f"Amount out of uint256 range: {value!r}")
    return amount


def to_token(wei: int, decimals: int = NATIVE_DECIMALS) -> Decimal:
    """Return the exact token amount for a wei value."""

    with localcontext() as ctx:
        # 2**256 has 78 digits; leave room for the sign and scale.
        ctx.prec = 100
        return Decimal(wei).scaleb(-decimals)


def format_token(wei: int, decimals: int = NATIVE_DECIMALS) -> str:
    """Render a wei value as a plain decimal token amount, e.g. 10**18 -> "1"."""

    amount = to_token(wei, decimals)
    if amount == 0:
        return "0"
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def to_token_float(wei: int, decimals: int = NATIVE_DECIMALS) -> float:
    """Lossy float form of ``to_token``; precision drops past ~15 digits."""

    return float(to_token(wei, decimals))

"""
Amount value object - exact base-unit amounts.

Converts human-entered decimal strings to integer base units (lamports,
token atoms) and back, using integer arithmetic only. Binary floating point
cannot represent every lamport amount above 2**53, so no float ever touches
an amount.
"""

import re
from dataclasses import dataclass
from decimal import Decimal

from guichet.domain.exceptions import InvalidAmountError

LAMPORTS_PER_SOL = 1_000_000_000
SOL_DECIMALS = 9

# SPL token amounts and lamport transfers are u64 on chain
MAX_BASE_UNITS = 2**64 - 1
MAX_EXPONENT = 255

_DECIMAL_PATTERN = re.compile(r"^([+-]?)([0-9]*)(?:\.([0-9]*))?$")


@dataclass(frozen=True)
class Amount:
    """
    Non-negative integer amount in a denomination's smallest unit.

    Business rules:
    - base_units is an exact int, never a float
    - exponent is the number of decimal places of the denomination
    - display value is base_units / 10**exponent
    """

    base_units: int
    exponent: int

    def __post_init__(self):
        """Validate amount on creation."""
        if isinstance(self.base_units, bool) or not isinstance(self.base_units, int):
            raise TypeError("base_units must be an int")
        if not isinstance(self.exponent, int) or isinstance(self.exponent, bool):
            raise TypeError("exponent must be an int")
        if self.base_units < 0:
            raise ValueError("base_units cannot be negative")
        if not 0 <= self.exponent <= MAX_EXPONENT:
            raise ValueError(f"exponent must be between 0 and {MAX_EXPONENT}")

    @classmethod
    def lamports(cls, value: int) -> "Amount":
        """Create a native SOL amount from lamports."""
        return cls(base_units=value, exponent=SOL_DECIMALS)

    @property
    def display_value(self) -> Decimal:
        """Exact decimal value (base_units / 10**exponent)."""
        return Decimal(from_base_units(self))

    def to_display(self) -> str:
        """Fixed-width display with every decimal place (e.g. '1.500000000')."""
        if self.exponent == 0:
            return str(self.base_units)
        whole, fraction = divmod(self.base_units, 10**self.exponent)
        return f"{whole}.{str(fraction).zfill(self.exponent)}"

    def is_zero(self) -> bool:
        """Check whether the amount is empty."""
        return self.base_units == 0

    def __str__(self) -> str:
        """Canonical decimal string."""
        return from_base_units(self)


def to_base_units(decimal_string: str, exponent: int) -> Amount:
    """
    Convert a decimal string to an exact base-unit Amount.

    Integer and fractional parts are parsed separately and combined with
    integer scaling. Trailing fractional zeros are ignored; any other digit
    beyond `exponent` places is rejected rather than truncated.

    Args:
        decimal_string: User-entered amount (e.g. "1.5")
        exponent: Decimal places of the denomination (9 for SOL)

    Returns:
        Amount with base_units == value * 10**exponent

    Raises:
        InvalidAmountError: If input is empty, not a plain decimal number,
            not positive, too precise, or above the u64 range

    Examples:
        >>> to_base_units("1.5", 9).base_units
        1500000000
    """
    if not 0 <= exponent <= MAX_EXPONENT:
        raise ValueError(f"exponent must be between 0 and {MAX_EXPONENT}")

    if not isinstance(decimal_string, str):
        raise InvalidAmountError(repr(decimal_string), "amount must be text")

    text = decimal_string.strip()
    if not text:
        raise InvalidAmountError(decimal_string, "amount is required")

    match = _DECIMAL_PATTERN.match(text)
    if match is None:
        raise InvalidAmountError(decimal_string, "not a decimal number")

    sign, whole_digits, fraction_digits = match.groups()
    # "", "+", "." carry no digits at all
    if not whole_digits and not fraction_digits:
        raise InvalidAmountError(decimal_string, "not a decimal number")
    fraction_digits = (fraction_digits or "").rstrip("0")

    if len(fraction_digits) > exponent:
        raise InvalidAmountError(
            decimal_string,
            f"more than {exponent} decimal places",
        )

    base_units = int(whole_digits or "0") * 10**exponent
    if fraction_digits:
        base_units += int(fraction_digits.ljust(exponent, "0"))

    if base_units == 0:
        raise InvalidAmountError(decimal_string, "must be greater than zero")
    if sign == "-":
        raise InvalidAmountError(decimal_string, "must be greater than zero")
    if base_units > MAX_BASE_UNITS:
        raise InvalidAmountError(decimal_string, "exceeds the maximum amount")

    return Amount(base_units=base_units, exponent=exponent)


def from_base_units(amount: Amount | int, exponent: int | None = None) -> str:
    """
    Convert base units back to a canonical decimal string.

    Exact inverse of to_base_units: no trailing fractional zeros, no
    trailing dot, no leading zeros beyond a single '0'.

    Args:
        amount: Amount, or raw base units when exponent is given
        exponent: Decimal places (required when amount is an int)

    Returns:
        Canonical decimal string (e.g. "1.5")
    """
    if isinstance(amount, Amount):
        base_units, exponent = amount.base_units, amount.exponent
    else:
        if exponent is None:
            raise ValueError("exponent is required for raw base units")
        base_units = Amount(base_units=amount, exponent=exponent).base_units

    if exponent == 0:
        return str(base_units)

    whole, fraction = divmod(base_units, 10**exponent)
    if fraction == 0:
        return str(whole)
    return f"{whole}.{str(fraction).zfill(exponent).rstrip('0')}"

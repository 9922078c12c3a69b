"""Integer arithmetic for the Neo currency.

All stakes, payouts, fees and balances are whole Neos (int). No float, no Decimal.
"""

BPS_DENOMINATOR = 10000


def validate_fee_bps(fee_bps: int) -> None:
    """Validate that a fee is in the range [0, 10000] basis points."""
    if isinstance(fee_bps, bool) or not isinstance(fee_bps, int):
        raise ValueError(f"Fee must be an integer number of bps, got {fee_bps!r}")
    if not (0 <= fee_bps <= BPS_DENOMINATOR):
        raise ValueError(f"Fee must be between 0 and 10000 bps, got {fee_bps}")


def is_positive_amount(amount: object) -> bool:
    """True for a strictly positive int (bool excluded)."""
    return isinstance(amount, int) and not isinstance(amount, bool) and amount > 0


def calculate_fee(total_pot: int, fee_bps: int) -> int:
    """Platform fee with floor division.

    fee = floor(total_pot * fee_bps / 10000)
    """
    if total_pot == 0 or fee_bps == 0:
        return 0
    return (total_pot * fee_bps) // BPS_DENOMINATOR


def neos_to_display(amount: int) -> str:
    """Display string: 1500 -> '1,500 Neos', -20 -> '-20 Neos', 1 -> '1 Neo'."""
    unit = "Neo" if abs(amount) == 1 else "Neos"
    return f"{amount:,} {unit}"

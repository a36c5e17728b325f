"""Integer arithmetic utilities for cents-based money.

All prices, budgets, bids and balances use int (cents). No float, no Decimal.
"""


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def calculate_fee(amount: int, fee_rate_bps: int) -> int:
    """Calculate fee with ceiling division (platform never loses).

    fee = ceil(amount * fee_rate_bps / 10000)
    Using integer ceiling: (a + b - 1) // b
    """
    if amount == 0 or fee_rate_bps == 0:
        return 0
    return (amount * fee_rate_bps + 9999) // 10000

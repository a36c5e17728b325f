"""Platform fee — charged on top of the bid or budget, never deducted from the payee."""

from dataclasses import dataclass

from config.settings import settings
from src.sb_common.cents import calculate_fee

PLATFORM_FEE_BPS = settings.PLATFORM_FEE_BPS


@dataclass(frozen=True)
class FeeBreakdown:
    amount: int  # cents, what the photographer is owed
    fee: int     # cents, platform fee
    total: int   # cents, what the client is charged


def fee_breakdown(amount_cents: int, fee_bps: int = PLATFORM_FEE_BPS) -> FeeBreakdown:
    """8000 -> FeeBreakdown(amount=8000, fee=1200, total=9200) at 1500 bps."""
    fee = calculate_fee(amount_cents, fee_bps)
    return FeeBreakdown(amount=amount_cents, fee=fee, total=amount_cents + fee)

"""Difference resolution between the computed and the actual ending balance."""

from ..models.reconciliation import Resolution


def resolve(computed_balance_cents: int, actual_balance_cents: int) -> Resolution:
    """
    Compare the computed balance with the user-confirmed actual balance.

    Amounts are integer cents, so the balanced check is exact equality.

    Args:
        computed_balance_cents: Starting balance plus the cleared transactions
        actual_balance_cents: Ending balance the user confirmed

    Returns:
        Resolution with ``difference = actual - computed``
    """
    difference = actual_balance_cents - computed_balance_cents
    return Resolution(
        computed_balance_cents=computed_balance_cents,
        actual_balance_cents=actual_balance_cents,
        difference_cents=difference,
        is_balanced=difference == 0,
    )

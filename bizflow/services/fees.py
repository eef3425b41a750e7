from flask import current_app

from bizflow.services.money import percent_of


def calc_withdrawal_fee(amount: int) -> tuple[int, int]:
    """
    Returns (fee, net_amount) in kobo for a gross withdrawal of ``amount`` kobo.
    """
    pct = current_app.config.get("WITHDRAW_FEE_PERCENT", "0.15")
    fee = percent_of(amount, pct)
    net = amount - fee
    return fee, net

from decimal import Decimal

from core.store import find_applicable

ZERO = Decimal("0")


def achievable_discount(offer, amount_to_pay):
    """
    Discount an offer yields on `amount_to_pay`.

    Percentage offers are capped at max_discount when a cap is set; offers
    without a percentage are flat max_discount offers.
    """
    percentage = offer.discount_percentage or 0
    max_discount = Decimal(offer.max_discount or 0)

    if percentage > 0:
        discount = amount_to_pay * percentage / 100
        if max_discount > 0 and discount > max_discount:
            discount = max_discount
        return discount
    if max_discount > 0:
        return max_discount
    return ZERO


def best_discount(offers, amount_to_pay):
    return max((achievable_discount(o, amount_to_pay) for o in offers), default=ZERO)


def highest_discount(session, amount_to_pay, bank_name, payment_instrument=None):
    """Best discount among stored offers applicable to this payment; 0 if none apply."""
    offers = find_applicable(session, amount_to_pay, bank_name, payment_instrument)
    return best_discount(offers, amount_to_pay)

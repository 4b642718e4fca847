import logging
import re
from decimal import Decimal, InvalidOperation

from core.schemas import OfferRecord, PaymentInstrument

logger = logging.getLogger(__name__)

# Interest waivers on EMI are not discounts on the amount paid
FULL_INTEREST_WAIVER = 'EMI_FULL_INTEREST_WAIVER'

PERCENTAGE_PATTERN = re.compile(r'(\d+)% off')

# Where the content root lives, tried in order
ROOT_STRATEGIES = (
    lambda payload: payload.get('RESPONSE'),
    lambda payload: payload,
)

# Where the adjustment list lives inside the content root, tried in order
ADJUSTMENT_LIST_PATHS = (
    ('adjustment_list',),
    ('options', 0, 'adjustments', 'adjustment_list'),
)


def dig(data, path):
    """Follow a path of dict keys / list indexes, returning None where it breaks off."""
    for step in path:
        if isinstance(step, int):
            if not isinstance(data, list) or len(data) <= step:
                return None
        elif not isinstance(data, dict):
            return None
        data = data[step] if isinstance(step, int) else data.get(step)
    return data


def unwrap(payload):
    for strategy in ROOT_STRATEGIES:
        root = strategy(payload)
        if isinstance(root, dict):
            return root
    return {}


def find_adjustment_list(root):
    for path in ADJUSTMENT_LIST_PATHS:
        adjustments = dig(root, path)
        if isinstance(adjustments, list):
            return adjustments
    return []


def build_contributors_map(root):
    """Map adjustment_id -> contributors from every section of `offer_sections`."""
    contributors_map = {}
    sections = root.get('offer_sections') or {}
    if isinstance(sections, dict):
        sections = sections.values()
    for section in sections:
        if not isinstance(section, dict) or not isinstance(section.get('offers'), list):
            continue
        for offer in section['offers']:
            if not isinstance(offer, dict):
                continue
            if offer.get('adjustment_id') and offer.get('contributors'):
                contributors_map[offer['adjustment_id']] = offer['contributors']
    return contributors_map


def parse_percentage(summary):
    """Extract N from the first "N% off" in the summary; 0 when there is none."""
    if not isinstance(summary, str):
        return 0
    match = PERCENTAGE_PATTERN.search(summary)
    if not match:
        return 0
    return min(int(match.group(1)), 100)


def to_major_units(value):
    """Convert paise to rupees. Missing or unparseable values count as 0."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite() or amount < 0:
        return Decimal("0")
    return amount / 100


def build_payment_instruments(contributors):
    instruments = contributors.get('payment_instrument')
    banks = contributors.get('banks')
    if not isinstance(instruments, list):
        instruments = []
    banks = [b for b in banks if isinstance(b, str)] if isinstance(banks, list) else []
    return [
        PaymentInstrument(instrument=instrument, banks=list(banks))
        for instrument in instruments
        if isinstance(instrument, str)
    ]


def _text(value):
    return value if isinstance(value, str) else ''


def normalize_offers(payload):
    """
    Turn one vendor offer API response into canonical offer records.

    Adjustments carry the discount terms; `offer_sections` carry the banks and
    payment instruments, keyed by the same adjustment_id. Adjustments without a
    matching contributor entry, or whose entry names no instrument or bank,
    are dropped.
    """
    if not isinstance(payload, dict):
        return []

    root = unwrap(payload)
    contributors_map = build_contributors_map(root)

    offers = []
    for adjustment in find_adjustment_list(root):
        details = adjustment.get('offer_details') if isinstance(adjustment, dict) else None
        if not details or not isinstance(details, dict):
            continue
        if details.get('adjustment_sub_type') == FULL_INTEREST_WAIVER:
            continue

        adjustment_id = details.get('adjustment_id')
        contributors = contributors_map.get(adjustment_id) if isinstance(adjustment_id, str) else None
        if not isinstance(contributors, dict):
            logger.debug("No contributors for adjustment %s, skipping", adjustment_id)
            continue

        payment_instruments = build_payment_instruments(contributors)
        if not any(pi.banks for pi in payment_instruments):
            logger.debug("No payment instruments or banks for adjustment %s, skipping", adjustment_id)
            continue

        limits = details.get('offer_txn_limits') or {}
        if not isinstance(limits, dict):
            limits = {}

        offers.append(OfferRecord(
            adjustment_id=adjustment_id,
            title=_text(details.get('title')),
            description=_text(details.get('summary')),
            type=_text(details.get('adjustment_type')),
            payment_instruments=payment_instruments,
            min_trxn_value=to_major_units(limits.get('min_txn_value')),
            max_discount=to_major_units(limits.get('max_discount_per_txn')),
            discount_percentage=parse_percentage(details.get('summary')),
        ))
    return offers

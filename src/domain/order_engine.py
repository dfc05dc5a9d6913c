"""
Order pricing and validation engine.

Turns a raw form submission into a validated, priced OrderRecord:
1. Reject honeypot spam
2. Check required identity fields and email shape
3. Check embroidery text when customization is requested
4. Check product selectors the form includes
5. Parse quantity and compute the total

Pure functions: no I/O, rejections are raised as OrderRejection subclasses.
"""

import logging
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from .models import OrderRecord, RawSubmission, RejectionKind

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

UNIT_PRICE = Decimal('29.99')
GIFT_WRAP_PRICE = Decimal('5.00')
RUSH_DELIVERY_PRICE = Decimal('15.00')
CUSTOMIZATION_PRICE = Decimal('10.00')

HONEYPOT_FIELD = 'website'
REQUIRED_FIELDS = ('firstName', 'lastName', 'email')
PRODUCT_FIELDS = ('size', 'color', 'material')

_FALSE_STRINGS = {'false', 'off', '0', 'no'}
# At most 9 digits; longer strings are rejected as invalid quantities
_QUANTITY_PATTERN = re.compile(r'^[+-]?\d{1,9}$')

MESSAGES = {
    RejectionKind.SPAM: "Spam detected. Submission blocked.",
    RejectionKind.MISSING_FIELDS: "Please fill in all required fields",
    RejectionKind.INVALID_EMAIL: "Please enter a valid email address",
    RejectionKind.MISSING_EMBROIDERY: (
        "Please enter embroidery text or uncheck the customization option"
    ),
    RejectionKind.INVALID_QUANTITY: "Please enter a valid quantity",
}


# ============================================================================
# Custom Exception Classes
# ============================================================================

class OrderRejection(Exception):
    """Base class for submissions the engine refuses to price."""

    def __init__(self, kind: RejectionKind, message: Optional[str] = None):
        self.kind = kind
        super().__init__(message or MESSAGES[kind])

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(OrderRejection):
    """Raised when the customer can fix the submission and retry."""
    pass


class SpamRejection(OrderRejection):
    """Raised when the honeypot field is filled in."""

    def __init__(self):
        super().__init__(RejectionKind.SPAM)


# ============================================================================
# Field helpers
# ============================================================================

def _text(raw: RawSubmission, key: str) -> Optional[str]:
    """Return the trimmed string value for key, or None when blank/absent."""
    value = raw.get(key)
    if value is None or isinstance(value, bool):
        return None
    value = str(value).strip()
    return value or None


def _flag(raw: RawSubmission, key: str) -> bool:
    """
    Interpret a checkbox value.

    Browsers submit checked boxes as "on" and omit unchecked ones; JSON
    callers send booleans. Anything else non-blank counts as checked unless
    it spells out a negative.
    """
    value = raw.get(key)
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    value = str(value).strip().lower()
    return bool(value) and value not in _FALSE_STRINGS


def parse_quantity(value: Any) -> int:
    """
    Parse the quantity field.

    Absent or blank values default to 1, integral values below 1 are clamped
    to 1.

    Raises:
        ValidationError: If the value is not an integer of at most 9 digits
    """
    if value is None:
        return 1
    if isinstance(value, bool):
        raise ValidationError(RejectionKind.INVALID_QUANTITY)
    if isinstance(value, int):
        return max(value, 1)

    text = str(value).strip()
    if not text:
        return 1
    if not _QUANTITY_PATTERN.match(text):
        raise ValidationError(RejectionKind.INVALID_QUANTITY)
    return max(int(text), 1)


def calculate_total(
    quantity: int,
    gift_wrap: bool = False,
    rush_delivery: bool = False,
    customization: bool = False
) -> str:
    """
    Compute the order total as a two-decimal string.

    Example:
        >>> calculate_total(2, gift_wrap=True)
        '64.98'
    """
    total = UNIT_PRICE + max(quantity - 1, 0) * UNIT_PRICE
    if gift_wrap:
        total += GIFT_WRAP_PRICE
    if rush_delivery:
        total += RUSH_DELIVERY_PRICE
    if customization:
        total += CUSTOMIZATION_PRICE
    return f"{total.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):.2f}"


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ''))


# ============================================================================
# Pipeline
# ============================================================================

def validate_and_price(raw: RawSubmission) -> OrderRecord:
    """
    Validate a raw submission and return the priced order.

    Checks run in a fixed order and the first failure wins.

    Args:
        raw: Field name -> value mapping from the order form

    Returns:
        OrderRecord: Validated order with total_price filled in

    Raises:
        SpamRejection: If the honeypot field is filled in
        ValidationError: If a required field is missing or malformed
    """
    if _text(raw, HONEYPOT_FIELD):
        raise SpamRejection()

    if any(_text(raw, key) is None for key in REQUIRED_FIELDS):
        raise ValidationError(RejectionKind.MISSING_FIELDS)

    email = _text(raw, 'email')
    if not is_valid_email(email):
        raise ValidationError(RejectionKind.INVALID_EMAIL)

    customization = _flag(raw, 'customization')
    embroidery_text = _text(raw, 'embroideryText')
    if customization and not embroidery_text:
        raise ValidationError(RejectionKind.MISSING_EMBROIDERY)

    # Product selectors are only required when the form renders them
    missing_product = [k for k in PRODUCT_FIELDS if k in raw and _text(raw, k) is None]
    if missing_product:
        logger.debug(f"Missing product fields: {missing_product}")
        raise ValidationError(RejectionKind.MISSING_FIELDS)

    quantity = parse_quantity(raw.get('quantity'))
    gift_wrap = _flag(raw, 'giftWrap')
    rush_delivery = _flag(raw, 'rushDelivery')

    total_price = calculate_total(
        quantity,
        gift_wrap=gift_wrap,
        rush_delivery=rush_delivery,
        customization=customization
    )
    logger.debug(f"Priced order: quantity={quantity}, total={total_price}")

    return OrderRecord(
        first_name=_text(raw, 'firstName'),
        last_name=_text(raw, 'lastName'),
        email=email,
        total_price=total_price,
        quantity=quantity,
        phone=_text(raw, 'phone'),
        street=_text(raw, 'street'),
        city=_text(raw, 'city'),
        state=_text(raw, 'state'),
        zip_code=_text(raw, 'zip'),
        country=_text(raw, 'country'),
        size=_text(raw, 'size'),
        color=_text(raw, 'color'),
        material=_text(raw, 'material'),
        customization=customization,
        embroidery_text=embroidery_text if customization else None,
        gift_wrap=gift_wrap,
        rush_delivery=rush_delivery,
        bag_color=_text(raw, 'bagColor'),
        trim_color=_text(raw, 'trimColor'),
        surprise_me=_flag(raw, 'surpriseMe'),
        topo_map=_flag(raw, 'topoMap'),
        drainage_text=_text(raw, 'drainageText'),
        paddle_clips=_flag(raw, 'paddleClips'),
        padded_body=_flag(raw, 'paddedBody'),
        happy_swims_valve=_flag(raw, 'happySwimsValve'),
        pack_towel=_flag(raw, 'packTowel'),
        key_ring=_flag(raw, 'keyRing'),
        phone_strap=_flag(raw, 'phoneStrap'),
        special_instructions=_text(raw, 'specialInstructions'),
    )

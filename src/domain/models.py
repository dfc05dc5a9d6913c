"""
Data models for the order intake domain.

These type-safe data structures define clear contracts between components.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

# Field name -> value, exactly as the order form submits it
RawSubmission = Mapping[str, Union[str, bool, int, None]]


class RejectionKind(str, Enum):
    """Reasons an order submission can be turned away."""
    SPAM = 'spam'
    MISSING_FIELDS = 'missing_fields'
    INVALID_EMAIL = 'invalid_email'
    MISSING_EMBROIDERY = 'missing_embroidery'
    INVALID_QUANTITY = 'invalid_quantity'


class SubmissionState(str, Enum):
    """Lifecycle of a single form submission."""
    IDLE = 'idle'
    SUBMITTING = 'submitting'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


@dataclass(frozen=True)
class OrderRecord:
    """
    Validated, priced order.

    Attributes:
        first_name: Customer first name
        last_name: Customer last name
        email: Customer email address
        quantity: Number of units (always >= 1)
        total_price: Fixed-point price string with two decimals
        customization: Whether custom embroidery was requested
        embroidery_text: Text to embroider (set when customization is True)
        special_instructions: Freeform notes from the customer
    """
    first_name: str
    last_name: str
    email: str
    total_price: str
    quantity: int = 1
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    customization: bool = False
    embroidery_text: Optional[str] = None
    gift_wrap: bool = False
    rush_delivery: bool = False
    bag_color: Optional[str] = None
    trim_color: Optional[str] = None
    surprise_me: bool = False
    topo_map: bool = False
    drainage_text: Optional[str] = None
    paddle_clips: bool = False
    padded_body: bool = False
    happy_swims_valve: bool = False
    pack_towel: bool = False
    key_ring: bool = False
    phone_strap: bool = False
    special_instructions: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def address_parts(self) -> List[str]:
        """Non-empty address components in mailing order."""
        parts = [self.street, self.city, self.state, self.zip_code, self.country]
        return [p for p in parts if p]

    @property
    def has_product_details(self) -> bool:
        """True when the order came from a form with product selectors."""
        return bool(self.size or self.color or self.material)

    @property
    def addon_labels(self) -> List[str]:
        """Human-readable names of the selected add-ons."""
        labels = [
            (self.paddle_clips, 'Paddle Clips'),
            (self.padded_body, 'Padded Body'),
            (self.happy_swims_valve, 'Happy Swims Inflation Valve'),
            (self.pack_towel, 'Pack Towel'),
            (self.key_ring, 'Key Ring'),
            (self.phone_strap, 'Phone Strap'),
        ]
        return [label for selected, label in labels if selected]


@dataclass(frozen=True)
class OutboundEmail:
    """
    Message handed to an email provider by the relay endpoint.

    Attributes:
        sender: Verified "from" address
        to: Recipient address
        subject: Subject line
        html: Rendered HTML body
        reply_to: Optional Reply-To address
    """
    sender: str
    to: str
    subject: str
    html: str
    reply_to: Optional[str] = None


@dataclass
class SubmissionOutcome:
    """
    Result of a controller submit.

    This explicit result type makes success/failure handling clear for
    callers; the controller never lets submission errors escape.

    Attributes:
        state: Controller state after the submit
        message: User-facing message (confirmation or error)
        order: The validated order (if validation passed)
        rejection: Why the submission was rejected (if it was)
        relay_response: Relay endpoint payload (if the send succeeded)
    """
    state: SubmissionState
    message: str = ''
    order: Optional[OrderRecord] = None
    rejection: Optional[RejectionKind] = None
    relay_response: Optional[Dict[str, Any]] = None

    @property
    def success(self) -> bool:
        return self.state == SubmissionState.SUCCEEDED

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.success:
            return f"SubmissionOutcome(success=True, total={self.order.total_price if self.order else None})"
        return f"SubmissionOutcome(success=False, rejection={self.rejection}, message={self.message})"

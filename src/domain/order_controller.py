"""
Order submission controller.

Owns the order form's field values and submission state, and runs one
submission end to end:
1. Validate and price the form (order_engine)
2. Render the email body (email_renderer)
3. Post it to the mail relay (injected relay client)
4. Move to success or failure and update the form

Validation and relay errors never propagate out of submit(); every call
returns a SubmissionOutcome.
"""

import logging
from typing import Any, Dict, Optional

from .models import OrderRecord, RejectionKind, SubmissionOutcome, SubmissionState
from .order_engine import OrderRejection, SpamRejection, validate_and_price
from services.email_renderer import ORDER_EMAIL_SUBJECT, render_order_email
from integrations.relay_client import RelayError, RelayResponseError

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to submit order. Please try again or contact support."
SUCCESS_MESSAGE = "Thank you! Your order has been submitted."

SUBMIT_LABEL = "Submit Order"
SUBMITTING_LABEL = "Submitting..."
SUBMIT_AGAIN_LABEL = "Submit Another Order"

CHECKBOX_FIELDS = ('giftWrap', 'rushDelivery', 'customization')


class OrderForm:
    """
    Field values of the order form.

    Checkboxes default to unchecked, quantity to 1, everything else is blank.
    """

    DEFAULTS: Dict[str, Any] = {
        'quantity': '1',
        'giftWrap': False,
        'rushDelivery': False,
        'customization': False,
    }

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.values: Dict[str, Any] = dict(self.DEFAULTS)
        if initial:
            self.values.update(initial)

    def set(self, name: str, value: Any) -> None:
        self.values[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the current values, as a RawSubmission."""
        return dict(self.values)

    def reset(self) -> None:
        self.values = dict(self.DEFAULTS)


class OrderSubmissionController:
    """
    Drives the order form through idle -> submitting -> succeeded|failed.

    The relay client is injected so tests (and other front ends) can supply
    their own transport. It must provide
    send_email(to, subject, html, reply_to=None).
    """

    def __init__(self, relay_client: Any, form: Optional[OrderForm] = None):
        self.relay_client = relay_client
        self.form = form or OrderForm()
        self.state = SubmissionState.IDLE
        self.submit_enabled = True
        self.submit_label = SUBMIT_LABEL
        self.error_message: Optional[str] = None
        self.error_detail: Optional[str] = None
        self.success_visible = False
        self.embroidery_visible = bool(self.form.get('customization'))

    # ------------------------------------------------------------------
    # Form interaction
    # ------------------------------------------------------------------

    def update_field(self, name: str, value: Any) -> None:
        """Record a field edit. Ends any finished submission."""
        self._return_to_idle()
        self.form.set(name, value)

    def toggle_customization(self, checked: bool) -> None:
        """Show or hide the embroidery input; unchecking clears its text."""
        self._return_to_idle()
        self.form.set('customization', checked)
        self.embroidery_visible = checked
        if not checked:
            self.form.set('embroideryText', '')

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self) -> SubmissionOutcome:
        """
        Submit the current form.

        Returns:
            SubmissionOutcome describing the resulting state
        """
        if self.state == SubmissionState.SUBMITTING:
            logger.warning("Submit ignored: a submission is already in flight")
            return SubmissionOutcome(state=self.state, message=SUBMITTING_LABEL)

        self._begin_submission()
        raw = self.snapshot_for_submission()

        try:
            order = validate_and_price(raw)
        except SpamRejection as e:
            logger.warning("Spam detected by honeypot field, submission blocked")
            return self._fail(GENERIC_FAILURE_MESSAGE, rejection=e.kind)
        except OrderRejection as e:
            logger.info(f"Order rejected by validation: {e.kind.value}")
            return self._fail(e.message, rejection=e.kind)
        except Exception as e:
            logger.error(f"Unexpected error validating order: {e}", exc_info=True)
            self.error_detail = str(e)
            return self._fail(GENERIC_FAILURE_MESSAGE)

        try:
            html = render_order_email(order)
            response = self.relay_client.send_email(
                to=order.email,
                subject=ORDER_EMAIL_SUBJECT,
                html=html,
                reply_to=order.email
            )
        except RelayResponseError as e:
            logger.error(f"Relay rejected order email: status={e.status_code}, error={e}")
            self.error_detail = str(e)
            return self._fail(GENERIC_FAILURE_MESSAGE, order=order)
        except RelayError as e:
            logger.error(f"Relay unreachable: {e}")
            self.error_detail = str(e)
            return self._fail(GENERIC_FAILURE_MESSAGE, order=order)
        except Exception as e:
            logger.error(f"Unexpected error submitting order: {e}", exc_info=True)
            self.error_detail = str(e)
            return self._fail(GENERIC_FAILURE_MESSAGE, order=order)

        logger.info(f"Order submitted: total={order.total_price}")
        self.state = SubmissionState.SUCCEEDED
        self.success_visible = True
        self.submit_enabled = True
        self.submit_label = SUBMIT_AGAIN_LABEL
        self.form.reset()
        self.embroidery_visible = False

        return SubmissionOutcome(
            state=self.state,
            message=SUCCESS_MESSAGE,
            order=order,
            relay_response=response
        )

    def snapshot_for_submission(self) -> Dict[str, Any]:
        """Form values with unchecked checkboxes normalized to False."""
        raw = self.form.snapshot()
        for name in CHECKBOX_FIELDS:
            if not raw.get(name):
                raw[name] = False
        # Price is always derived, never taken from the form
        raw.pop('totalPrice', None)
        return raw

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def _begin_submission(self) -> None:
        self.state = SubmissionState.SUBMITTING
        self.submit_enabled = False
        self.submit_label = SUBMITTING_LABEL
        self.error_message = None
        self.error_detail = None
        self.success_visible = False

    def _fail(
        self,
        message: str,
        rejection: Optional[RejectionKind] = None,
        order: Optional[OrderRecord] = None
    ) -> SubmissionOutcome:
        self.state = SubmissionState.FAILED
        self.error_message = message
        self.submit_enabled = True
        self.submit_label = SUBMIT_LABEL
        return SubmissionOutcome(
            state=self.state,
            message=message,
            order=order,
            rejection=rejection
        )

    def _return_to_idle(self) -> None:
        if self.state in (SubmissionState.SUCCEEDED, SubmissionState.FAILED):
            self.state = SubmissionState.IDLE
            self.success_visible = False
            self.error_message = None
            self.error_detail = None
            self.submit_label = SUBMIT_LABEL

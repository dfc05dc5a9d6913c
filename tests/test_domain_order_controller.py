"""
Tests for the order submission controller.
"""

import pytest
from unittest.mock import MagicMock
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.models import RejectionKind, SubmissionState
from domain.order_controller import (
    GENERIC_FAILURE_MESSAGE,
    SUBMIT_AGAIN_LABEL,
    SUBMIT_LABEL,
    OrderForm,
    OrderSubmissionController,
)
from integrations.relay_client import RelayResponseError, TransportError


@pytest.fixture
def relay_client():
    client = MagicMock()
    client.send_email.return_value = {'success': True, 'data': {'id': 'msg-1'}}
    return client


@pytest.fixture
def controller(relay_client, valid_submission):
    return OrderSubmissionController(relay_client, OrderForm(valid_submission))


class TestSubmitSuccess:
    """Test the happy path."""

    def test_end_to_end_total_in_relayed_html(self, controller, relay_client):
        """Test quantity=2 with gift wrap relays an email showing $64.98."""
        controller.update_field('quantity', '2')
        controller.update_field('giftWrap', True)

        outcome = controller.submit()

        assert outcome.success is True
        assert outcome.order.total_price == '64.98'
        relay_client.send_email.assert_called_once()
        kwargs = relay_client.send_email.call_args[1]
        assert kwargs['to'] == 'jane@example.com'
        assert kwargs['reply_to'] == 'jane@example.com'
        assert kwargs['subject'] == 'Order Confirmation: Crotch Sac™'
        assert 'Total: $64.98' in kwargs['html']

    def test_success_state_and_form_reset(self, controller):
        outcome = controller.submit()

        assert outcome.state == SubmissionState.SUCCEEDED
        assert outcome.relay_response == {'success': True, 'data': {'id': 'msg-1'}}
        assert controller.state == SubmissionState.SUCCEEDED
        assert controller.success_visible is True
        assert controller.error_message is None
        assert controller.submit_enabled is True
        assert controller.submit_label == SUBMIT_AGAIN_LABEL
        assert controller.form.get('firstName') is None
        assert controller.form.get('quantity') == '1'

    def test_confirmation_persists_until_next_interaction(self, controller):
        controller.submit()
        assert controller.success_visible is True

        controller.update_field('firstName', 'John')

        assert controller.state == SubmissionState.IDLE
        assert controller.success_visible is False
        assert controller.submit_label == SUBMIT_LABEL


class TestSubmitRejected:
    """Test validation and spam handling."""

    def test_validation_error_shown(self, controller, relay_client):
        controller.update_field('email', 'not-an-email')

        outcome = controller.submit()

        assert outcome.state == SubmissionState.FAILED
        assert outcome.rejection == RejectionKind.INVALID_EMAIL
        assert controller.error_message == "Please enter a valid email address"
        assert controller.submit_enabled is True
        assert controller.submit_label == SUBMIT_LABEL
        relay_client.send_email.assert_not_called()

    def test_form_kept_after_validation_error(self, controller):
        controller.update_field('lastName', '')

        controller.submit()

        assert controller.form.get('firstName') == 'Jane'

    def test_honeypot_blocks_before_network(self, controller, relay_client):
        controller.update_field('website', 'http://spam.biz')

        outcome = controller.submit()

        assert outcome.rejection == RejectionKind.SPAM
        assert controller.error_message == GENERIC_FAILURE_MESSAGE
        relay_client.send_email.assert_not_called()

    def test_customization_requires_embroidery(self, controller, relay_client):
        controller.toggle_customization(True)

        outcome = controller.submit()

        assert outcome.rejection == RejectionKind.MISSING_EMBROIDERY
        relay_client.send_email.assert_not_called()


class TestSubmitRelayFailure:
    """Test transport and endpoint failures."""

    def test_endpoint_error(self, controller, relay_client):
        relay_client.send_email.side_effect = RelayResponseError("Domain not verified", 500)

        outcome = controller.submit()

        assert outcome.state == SubmissionState.FAILED
        assert outcome.message == GENERIC_FAILURE_MESSAGE
        assert controller.error_detail == "Domain not verified"
        assert controller.submit_enabled is True
        # Form is not reset so the customer can resubmit
        assert controller.form.get('firstName') == 'Jane'

    def test_transport_error(self, controller, relay_client):
        relay_client.send_email.side_effect = TransportError("Relay did not respond within 10s")

        outcome = controller.submit()

        assert outcome.state == SubmissionState.FAILED
        assert controller.error_message == GENERIC_FAILURE_MESSAGE
        assert controller.state == SubmissionState.FAILED

    def test_resubmit_after_failure(self, controller, relay_client):
        relay_client.send_email.side_effect = [
            TransportError("timeout"),
            {'success': True, 'data': {'id': 'msg-2'}},
        ]

        assert controller.submit().success is False
        outcome = controller.submit()

        assert outcome.success is True
        assert controller.error_message is None
        assert relay_client.send_email.call_count == 2

    def test_unexpected_client_error_is_contained(self, controller, relay_client):
        """Test a non-relay exception from the client still ends in a re-submittable FAILED state."""
        relay_client.send_email.side_effect = [
            ConnectionResetError("connection reset by peer"),
            {'success': True, 'data': {'id': 'msg-3'}},
        ]

        outcome = controller.submit()

        assert outcome.state == SubmissionState.FAILED
        assert controller.state == SubmissionState.FAILED
        assert controller.submit_enabled is True
        assert controller.error_message == GENERIC_FAILURE_MESSAGE
        assert controller.error_detail == "connection reset by peer"
        assert controller.submit().success is True

    def test_overlong_quantity_is_a_validation_error(self, controller, relay_client):
        controller.update_field('quantity', '9' * 5000)

        outcome = controller.submit()

        assert outcome.rejection == RejectionKind.INVALID_QUANTITY
        assert controller.error_message == 'Please enter a valid quantity'
        assert controller.state == SubmissionState.FAILED
        assert controller.submit_enabled is True
        relay_client.send_email.assert_not_called()


class TestFormInteraction:
    """Test form-level behavior."""

    def test_submit_ignored_while_in_flight(self, controller, relay_client):
        controller.state = SubmissionState.SUBMITTING

        outcome = controller.submit()

        assert outcome.state == SubmissionState.SUBMITTING
        relay_client.send_email.assert_not_called()

    def test_unchecking_customization_clears_text(self, controller):
        controller.toggle_customization(True)
        controller.update_field('embroideryText', 'JD')
        assert controller.embroidery_visible is True

        controller.toggle_customization(False)

        assert controller.embroidery_visible is False
        assert controller.form.get('embroideryText') == ''

    def test_snapshot_normalizes_checkboxes(self, relay_client):
        controller = OrderSubmissionController(relay_client, OrderForm({'giftWrap': None, 'totalPrice': '1.00'}))

        raw = controller.snapshot_for_submission()

        assert raw['giftWrap'] is False
        assert raw['rushDelivery'] is False
        assert 'totalPrice' not in raw


if __name__ == '__main__':
    pytest.main([__file__, '-v'])

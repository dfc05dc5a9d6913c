"""
End-to-end test: order form -> relay client -> relay handler -> provider.
"""

import json
import pytest
from unittest.mock import MagicMock, patch
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

import relay_handler
from domain.order_controller import OrderForm, OrderSubmissionController
from integrations.relay_client import RelayClient


def lambda_backed_session():
    """requests.Session stand-in that routes POSTs into the Lambda handler."""
    session = MagicMock()

    def post(url, **kwargs):
        event = {'httpMethod': 'POST', 'path': '/api/send-email', 'body': json.dumps(kwargs['json'])}
        result = relay_handler.lambda_handler(event, None)
        resp = MagicMock()
        resp.status_code = result['statusCode']
        resp.ok = 200 <= result['statusCode'] < 300
        resp.json.return_value = json.loads(result['body'])
        return resp

    session.post.side_effect = post
    return session


@patch('relay_handler.email_provider')
def test_order_total_reaches_provider(mock_provider, valid_submission):
    """Test quantity=2 with gift wrap is priced 64.98 and mailed through the relay."""
    mock_provider.name = 'resend'
    mock_provider.send.return_value = {'id': 'email-e2e'}
    valid_submission.update({'quantity': '2', 'giftWrap': True})

    controller = OrderSubmissionController(
        RelayClient('https://shop.example.com/api/send-email', session=lambda_backed_session()),
        OrderForm(valid_submission)
    )
    outcome = controller.submit()

    assert outcome.success is True
    assert outcome.relay_response == {'success': True, 'data': {'id': 'email-e2e'}}
    message = mock_provider.send.call_args[0][0]
    assert 'Total: $64.98' in message.html
    assert message.reply_to == 'jane@example.com'


@patch('relay_handler.email_provider')
def test_spam_never_reaches_relay(mock_provider, valid_submission):
    valid_submission['website'] = 'http://spam.biz'
    session = lambda_backed_session()

    controller = OrderSubmissionController(
        RelayClient('https://shop.example.com/api/send-email', session=session),
        OrderForm(valid_submission)
    )
    outcome = controller.submit()

    assert outcome.success is False
    session.post.assert_not_called()
    mock_provider.send.assert_not_called()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])

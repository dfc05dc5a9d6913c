"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-west-2')
os.environ.setdefault('EMAIL_PROVIDER', 'resend')
os.environ.setdefault('RESEND_API_KEY', 're_test_key')
os.environ.setdefault('RELAY_SENDER_ADDRESS', 'orders@example.com')
os.environ.setdefault('RELAY_RECIPIENT_MODE', 'fixed')
os.environ.setdefault('RELAY_FIXED_RECIPIENT', 'shop@example.com')
os.environ.setdefault('ENVIRONMENT', 'test')
os.environ.setdefault('LOG_LEVEL', 'INFO')


@pytest.fixture
def valid_submission():
    """Raw form submission that passes validation."""
    return {
        'firstName': 'Jane',
        'lastName': 'Doe',
        'email': 'jane@example.com',
        'quantity': '1',
        'giftWrap': False,
        'rushDelivery': False,
        'customization': False,
        'website': '',
    }

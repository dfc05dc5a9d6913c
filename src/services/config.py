"""
Relay endpoint configuration.

Settings are read from environment variables once per cold start and
validated up front, so a misconfigured deployment fails at import time
instead of on the first customer order.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

PROVIDER_RESEND = 'resend'
PROVIDER_SES = 'ses'
SUPPORTED_PROVIDERS = (PROVIDER_RESEND, PROVIDER_SES)

# Recipient policy: 'fixed' mails every order to the shop inbox,
# 'request' mails the address supplied in the request body.
RECIPIENT_FIXED = 'fixed'
RECIPIENT_REQUEST = 'request'
SUPPORTED_RECIPIENT_MODES = (RECIPIENT_FIXED, RECIPIENT_REQUEST)

DEFAULT_REGION = 'us-west-2'


class ConfigurationError(Exception):
    """Raised when relay configuration is invalid or missing."""
    pass


@dataclass(frozen=True)
class RelayConfig:
    """
    Process-wide relay settings.

    Attributes:
        provider: Email provider name ('resend' or 'ses')
        sender_address: Verified "from" address
        recipient_mode: 'fixed' or 'request'
        fixed_recipient: Recipient used in 'fixed' mode
        resend_api_key: Resend API key (required for the resend provider)
        aws_region: Region for the SES client
        allowed_origin: Value for the Access-Control-Allow-Origin header
        environment: Deployment label (dev, staging, prod)
    """
    provider: str
    sender_address: str
    recipient_mode: str
    fixed_recipient: Optional[str] = None
    resend_api_key: Optional[str] = None
    aws_region: str = DEFAULT_REGION
    allowed_origin: str = '*'
    environment: str = 'dev'


def _require(environ: Mapping[str, str], name: str) -> str:
    value = (environ.get(name) or '').strip()
    if not value:
        raise ConfigurationError(
            f"{name} environment variable is required but not set. "
            f"Please configure this in your SAM template or Lambda environment."
        )
    return value


def load_relay_config(environ: Optional[Mapping[str, str]] = None) -> RelayConfig:
    """
    Read and validate relay configuration from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        RelayConfig: Validated configuration

    Raises:
        ConfigurationError: If a required variable is missing or invalid
    """
    if environ is None:
        environ = os.environ

    provider = (environ.get('EMAIL_PROVIDER') or PROVIDER_RESEND).strip().lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ConfigurationError(
            f"EMAIL_PROVIDER must be one of {', '.join(SUPPORTED_PROVIDERS)}, "
            f"got: '{provider}'"
        )

    resend_api_key = None
    if provider == PROVIDER_RESEND:
        resend_api_key = _require(environ, 'RESEND_API_KEY')

    sender_address = _require(environ, 'RELAY_SENDER_ADDRESS')

    # Must be set explicitly; there is no default recipient policy
    recipient_mode = _require(environ, 'RELAY_RECIPIENT_MODE').lower()
    if recipient_mode not in SUPPORTED_RECIPIENT_MODES:
        raise ConfigurationError(
            f"RELAY_RECIPIENT_MODE must be one of "
            f"{', '.join(SUPPORTED_RECIPIENT_MODES)}, got: '{recipient_mode}'"
        )

    fixed_recipient = None
    if recipient_mode == RECIPIENT_FIXED:
        fixed_recipient = _require(environ, 'RELAY_FIXED_RECIPIENT')

    region = environ.get('AWS_REGION', environ.get('AWS_DEFAULT_REGION', DEFAULT_REGION))

    config = RelayConfig(
        provider=provider,
        sender_address=sender_address,
        recipient_mode=recipient_mode,
        fixed_recipient=fixed_recipient,
        resend_api_key=resend_api_key,
        aws_region=region,
        allowed_origin=environ.get('ALLOWED_ORIGIN', '*'),
        environment=environ.get('ENVIRONMENT', 'dev'),
    )

    logger.info(
        f"Relay configured: provider={config.provider}, "
        f"recipient_mode={config.recipient_mode}, sender={config.sender_address}"
    )
    return config

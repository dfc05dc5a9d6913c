"""
Transactional Email Provider Adapters

This module wraps the third-party services the relay endpoint sends mail
through. Each adapter exposes the same single capability:

    provider.send(OutboundEmail) -> {"id": "<provider message id>"}

Usage:
    from integrations import email_provider

    provider = email_provider.create_provider(config)
    result = provider.send(message)
    print(result['id'])
"""

import logging
from typing import Any, Dict, Optional

import boto3
import resend
from botocore.config import Config
from botocore.exceptions import ClientError

from domain.models import OutboundEmail
from services.config import PROVIDER_RESEND, PROVIDER_SES, ConfigurationError, RelayConfig

logger = logging.getLogger(__name__)


# ============================================================================
# Custom Exception Classes
# ============================================================================

class ProviderError(Exception):
    """Raised when the email provider rejects or fails a send."""
    pass


# ============================================================================
# Provider Adapters
# ============================================================================

class EmailProvider:
    """Base class for provider adapters."""

    name = 'base'

    def send(self, message: OutboundEmail) -> Dict[str, Any]:
        raise NotImplementedError


class ResendProvider(EmailProvider):
    """Send through the Resend API using the resend SDK."""

    name = PROVIDER_RESEND

    def __init__(self, api_key: str):
        if not api_key:
            raise ConfigurationError("Resend provider requires an API key")
        # The SDK reads its credential from module state
        resend.api_key = api_key
        logger.info("Resend provider initialized")

    def send(self, message: OutboundEmail) -> Dict[str, Any]:
        """
        Send an email via Resend.

        Args:
            message: Email to send

        Returns:
            Dict with the Resend message id

        Raises:
            ProviderError: If Resend rejects the request or is unreachable
        """
        params = {
            'from': message.sender,
            'to': [message.to],
            'subject': message.subject,
            'html': message.html,
        }
        if message.reply_to:
            params['reply_to'] = message.reply_to

        logger.info(f"Sending email via Resend to: {message.to}")
        try:
            response = resend.Emails.send(params)
        except Exception as e:
            logger.error(f"Resend send failed: {e}")
            raise ProviderError(str(e)) from e

        message_id = response.get('id') if isinstance(response, dict) else getattr(response, 'id', None)
        logger.info(f"Email sent via Resend: id={message_id}")
        return {'id': message_id}


class SesProvider(EmailProvider):
    """Send through Amazon SES v2 using boto3."""

    name = PROVIDER_SES

    def __init__(self, region: str, client: Optional[Any] = None):
        if client is None:
            # Configure with NO retries and strict timeouts; the caller decides
            # whether to resubmit
            client_config = Config(
                retries={
                    'max_attempts': 1,  # 1 attempt total (no retries)
                    'mode': 'standard'
                },
                connect_timeout=5,
                read_timeout=15
            )
            client = boto3.client('sesv2', region_name=region, config=client_config)
            logger.info(
                f"SES client initialized: region={region}, "
                f"connect_timeout=5s, read_timeout=15s, max_attempts=1"
            )
        self.client = client

    def send(self, message: OutboundEmail) -> Dict[str, Any]:
        """
        Send an email via SES.

        Args:
            message: Email to send

        Returns:
            Dict with the SES MessageId as 'id'

        Raises:
            ProviderError: If SES rejects the request
        """
        request = {
            'FromEmailAddress': message.sender,
            'Destination': {'ToAddresses': [message.to]},
            'Content': {
                'Simple': {
                    'Subject': {'Data': message.subject, 'Charset': 'UTF-8'},
                    'Body': {'Html': {'Data': message.html, 'Charset': 'UTF-8'}},
                }
            },
        }
        if message.reply_to:
            request['ReplyToAddresses'] = [message.reply_to]

        logger.info(f"Sending email via SES to: {message.to}")
        try:
            response = self.client.send_email(**request)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            error_message = e.response.get('Error', {}).get('Message', str(e))
            logger.error(f"SES send failed: error_code={error_code}, error_message={error_message}")
            raise ProviderError(error_message) from e

        message_id = response.get('MessageId')
        logger.info(f"Email sent via SES: id={message_id}")
        return {'id': message_id}


def create_provider(config: RelayConfig) -> EmailProvider:
    """
    Build the provider adapter named in the relay configuration.

    Raises:
        ConfigurationError: If the provider is unknown or missing credentials
    """
    if config.provider == PROVIDER_RESEND:
        return ResendProvider(config.resend_api_key)
    if config.provider == PROVIDER_SES:
        return SesProvider(config.aws_region)
    raise ConfigurationError(f"Unsupported email provider: {config.provider}")

"""
AWS Lambda handler for the order mail relay (API Gateway proxy integration).

Accepts {to, subject, html} from the order form and forwards it to the
configured email provider, keeping the provider credential off the client.
Policy: POST only, no retries, every failure mapped to a JSON error response.
"""

import base64
import json
import logging
import os
from typing import Any, Dict, Optional

from domain.models import OutboundEmail
from integrations.email_provider import ProviderError, create_provider
from services.config import RECIPIENT_FIXED, load_relay_config

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO'))

# Add console handler for local testing (AWS Lambda provides handlers automatically)
if not logger.handlers:
    console_handler = logging.StreamHandler()
    formatter = logging.Formatter('%(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

# Initialize configuration and provider once at module level (reused across invocations)
relay_config = load_relay_config()
email_provider = create_provider(relay_config)


def _response(status_code: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'application/json',
            'Access-Control-Allow-Origin': relay_config.allowed_origin
        },
        'body': json.dumps(payload)
    }


def _request_method(event: Dict[str, Any]) -> str:
    """HTTP method from a REST (v1) or HTTP API (v2) proxy event."""
    method = event.get('httpMethod')
    if not method:
        method = event.get('requestContext', {}).get('http', {}).get('method', '')
    return (method or '').upper()


def _parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decode the JSON request body.

    Raises:
        ValueError: If the body is not a JSON object
    """
    body = event.get('body')
    if body is None:
        return {}
    if isinstance(body, dict):
        return body

    if event.get('isBase64Encoded'):
        body = base64.b64decode(body).decode('utf-8')

    parsed = json.loads(body) if body else {}
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object")
    return parsed


def _field(body: Dict[str, Any], name: str) -> Optional[str]:
    value = body.get(name)
    if isinstance(value, str) and value.strip():
        return value
    return None


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Relay an order email through the configured provider.

    Expected request body:
    {
        "to": "customer@example.com",
        "subject": "Order Confirmation",
        "html": "<!DOCTYPE html>...",
        "replyTo": "customer@example.com"
    }

    Returns:
        API Gateway proxy response:
        200 {"success": true, "data": {"id": ...}}
        400 {"error": "Missing required fields"} / {"error": "Invalid JSON body"}
        405 {"error": "Method not allowed"}
        500 {"error": "<provider or internal message>"}
    """
    method = _request_method(event)
    logger.info(f"Relay handler called: method={method}, environment={relay_config.environment}")

    if method != 'POST':
        logger.info(f"Invalid method: {method}")
        return _response(405, {'error': 'Method not allowed'})

    try:
        body = _parse_body(event)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning(f"Invalid request body: {e}")
        return _response(400, {'error': 'Invalid JSON body'})

    subject = _field(body, 'subject')
    html = _field(body, 'html')
    to = _field(body, 'to')
    reply_to = _field(body, 'replyTo')

    required = [subject, html]
    if relay_config.recipient_mode != RECIPIENT_FIXED:
        required.append(to)

    if not all(required):
        logger.info(
            f"Missing required fields: subject={bool(subject)}, html={bool(html)}, to={bool(to)}"
        )
        return _response(400, {'error': 'Missing required fields'})

    if relay_config.recipient_mode == RECIPIENT_FIXED:
        recipient = relay_config.fixed_recipient
        reply_to = reply_to or to
    else:
        recipient = to

    message = OutboundEmail(
        sender=relay_config.sender_address,
        to=recipient,
        subject=subject,
        html=html,
        reply_to=reply_to
    )

    try:
        data = email_provider.send(message)
    except ProviderError as e:
        logger.error(f"Provider error sending email: {e}")
        return _response(500, {'error': str(e)})
    except Exception as e:
        logger.error(f"Error sending email: {e}", exc_info=True)
        return _response(500, {'error': str(e)})

    logger.info(f"Email relayed: provider={email_provider.name}, id={data.get('id')}")
    return _response(200, {'success': True, 'data': data})


def health_check(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Simple health check endpoint for monitoring.
    """
    return _response(200, {
        'status': 'healthy',
        'environment': relay_config.environment,
        'provider': relay_config.provider,
        'recipientMode': relay_config.recipient_mode
    })

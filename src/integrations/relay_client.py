"""
Mail Relay Client

HTTP client the order form uses to reach the mail relay endpoint. The
provider credential stays on the relay; this client only posts the rendered
email as JSON.

Usage:
    from integrations.relay_client import RelayClient

    client = RelayClient()
    client.send_email(to="jane@example.com", subject="Order", html="<p>...</p>")
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional

import requests

from services.config import ConfigurationError

logger = logging.getLogger(__name__)


def read_timeout_seconds(environ: Optional[Mapping[str, str]] = None) -> float:
    """
    Read RELAY_TIMEOUT_SECONDS, defaulting to 10.

    Raises:
        ConfigurationError: If the value is not a positive number
    """
    if environ is None:
        environ = os.environ

    raw = (environ.get('RELAY_TIMEOUT_SECONDS') or '10').strip()
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigurationError(
            f"RELAY_TIMEOUT_SECONDS must be a number of seconds, got: '{raw}'"
        )
    if not timeout > 0:
        raise ConfigurationError(
            f"RELAY_TIMEOUT_SECONDS must be greater than zero, got: '{raw}'"
        )
    return timeout


DEFAULT_ENDPOINT = os.environ.get('RELAY_ENDPOINT_URL', 'http://localhost:3000/api/send-email')
DEFAULT_TIMEOUT_SECONDS = read_timeout_seconds()


# ============================================================================
# Custom Exception Classes
# ============================================================================

class RelayError(Exception):
    """Base class for failures talking to the relay endpoint."""
    pass


class TransportError(RelayError):
    """Raised when the relay is unreachable or does not answer in time."""
    pass


class RelayResponseError(RelayError):
    """Raised when the relay answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int):
        self.status_code = status_code
        super().__init__(message)


class RelayClient:
    """
    Posts order emails to the relay endpoint.

    Every call carries an explicit timeout so an unresponsive relay turns
    into a TransportError instead of leaving the form stuck in "submitting".
    """

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        self.endpoint_url = endpoint_url or DEFAULT_ENDPOINT
        self.timeout = timeout if timeout is not None else DEFAULT_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        logger.debug(f"RelayClient initialized with endpoint={self.endpoint_url} timeout={self.timeout}")

    def send_email(
        self,
        to: str,
        subject: str,
        html: str,
        reply_to: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Ask the relay to send one email.

        Args:
            to: Recipient address (the relay may override it)
            subject: Subject line
            html: Rendered HTML body
            reply_to: Optional Reply-To address

        Returns:
            Dict: The relay's JSON response ({"success": true, "data": {...}})

        Raises:
            TransportError: On connection failure or timeout
            RelayResponseError: On a non-2xx response
        """
        payload = {'to': to, 'subject': subject, 'html': html}
        if reply_to:
            payload['replyTo'] = reply_to

        logger.info(f"Posting email to relay: url={self.endpoint_url}, html_length={len(html)}")
        try:
            resp = self.session.post(
                self.endpoint_url,
                json=payload,
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout
            )
        except requests.Timeout as e:
            logger.error(f"Relay request timed out after {self.timeout}s: {e}")
            raise TransportError(f"Relay did not respond within {self.timeout}s") from e
        except requests.RequestException as e:
            logger.error(f"Relay request failed: {e}")
            raise TransportError(str(e)) from e

        logger.info(f"Relay response status: {resp.status_code}")
        if not resp.ok:
            raise RelayResponseError(self._error_text(resp), resp.status_code)

        try:
            return resp.json()
        except ValueError:
            logger.warning("Relay returned a non-JSON success body")
            return {'success': True}

    @staticmethod
    def _error_text(resp: requests.Response) -> str:
        """Extract {"error": ...} from an error response, if present."""
        try:
            body = resp.json()
        except ValueError:
            return f"Failed to send email (HTTP {resp.status_code})"
        if isinstance(body, dict) and body.get('error'):
            return str(body['error'])
        return "Failed to send email"

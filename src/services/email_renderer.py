"""
Order email rendering.

Renders a validated OrderRecord into the self-contained HTML body that the
relay endpoint mails out. Templates live in the templates/ directory packaged
next to this module and are rendered through Jinja2 with autoescaping, so
every interpolated order field is HTML-escaped without per-field calls.
"""

import logging
from pathlib import Path
from typing import List, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from domain.models import OrderRecord

logger = logging.getLogger(__name__)

PRODUCT_NAME = 'Crotch Sac™'
ORDER_EMAIL_SUBJECT = f'Order Confirmation: {PRODUCT_NAME}'
ORDER_EMAIL_TEMPLATE = 'order_email.html'

# src/services/email_renderer.py -> src/services/templates/
TEMPLATES_DIR = Path(__file__).parent / 'templates'

# Initialize environment at module level (templates are compiled once and reused)
_environment = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(['html']),
    undefined=StrictUndefined,
)


def _customization_lines(order: OrderRecord) -> List[Tuple[str, str]]:
    """Label/value pairs for the customizations section, in display order."""
    lines = []
    if order.bag_color:
        lines.append(('Bag Color', order.bag_color))
    if order.trim_color:
        lines.append(('Trim Color', order.trim_color))
    if order.surprise_me:
        lines.append(('Surprise Me', 'Yes'))
    if order.topo_map:
        lines.append(('Topo Map', 'Yes'))
    if order.drainage_text:
        lines.append(('Drainage', order.drainage_text))
    return lines


def render_order_email(order: OrderRecord) -> str:
    """
    Render the order notification email.

    Args:
        order: Validated order

    Returns:
        str: Complete HTML document (inline styles, no external resources)

    Example:
        >>> html = render_order_email(order)
        >>> '<h2>Customer Information</h2>' in html
        True
    """
    template = _environment.get_template(ORDER_EMAIL_TEMPLATE)
    html = template.render(
        order=order,
        product_name=PRODUCT_NAME,
        customizations=_customization_lines(order),
    )
    logger.info(f"Rendered order email: {len(html)} characters")
    return html

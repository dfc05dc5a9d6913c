"""
Service functions for the order relay.

This package contains the email renderer and the relay configuration loader.
"""

__all__ = ['config', 'email_renderer']

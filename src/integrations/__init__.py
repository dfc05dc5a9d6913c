"""
External integrations: email providers and the mail relay HTTP client.
"""

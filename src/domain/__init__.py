"""
Domain layer for order intake business logic.

This layer contains:
- Data models (type-safe structures)
- Pricing and validation engine
- Order submission controller (form state + relay orchestration)
"""

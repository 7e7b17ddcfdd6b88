"""
Validator services for validating business rules and data integrity.
"""

from .order_validator import OrderValidator, Violation

__all__ = ["OrderValidator", "Violation"]

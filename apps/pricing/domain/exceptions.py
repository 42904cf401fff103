"""
Domain errors for the pricing bounded context.
"""


class PricingError(Exception):
    """Base class for pricing errors."""


class InvalidCartError(PricingError):
    """The cart is structurally invalid (no lines, negative quantity, weight or price)."""


class ConditionEvaluationError(PricingError):
    """A discount condition is malformed: unknown type or operator, or an unusable value."""

"""Squadron: lifecycle service for versioned agent squad templates."""

__version__ = "0.1.0"

"""HR Portal access service: role-based navigation access and backend proxy."""

__version__ = "0.1.0"

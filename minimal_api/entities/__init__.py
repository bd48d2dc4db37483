"""Entities module with an entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model with validation
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .core.user import User, UserRepository, UserTable
from .service.product import Product, ProductRepository, ProductTable

__all__ = [
    "User",
    "UserTable",
    "UserRepository",
    "Product",
    "ProductTable",
    "ProductRepository",
]

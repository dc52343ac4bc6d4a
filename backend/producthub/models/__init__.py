"""
ORM models. Importing this package registers every table with Base.metadata,
which Alembic autogenerate and the test suite's create_all rely on.
"""

from producthub.models.product import Product
from producthub.models.session import UserSession
from producthub.models.user import User

__all__ = ["Product", "User", "UserSession"]

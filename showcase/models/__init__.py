# Models package init
"""
ORM models. Importing this package registers every table with `Base.metadata`
(Alembic's autogenerate and `create_all` both rely on that).
"""

from showcase.models.item import Item
from showcase.models.token import PersonalAccessToken
from showcase.models.user import User

__all__ = ["Item", "PersonalAccessToken", "User"]

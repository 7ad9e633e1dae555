from storefinder.db.database import Base

# Import models
from storefinder.db.models.users import Users
from storefinder.db.models.stores import Stores, StoreTags

__all__ = [
    "Base",
    # Models
    "Users",
    "Stores",
    "StoreTags",
]

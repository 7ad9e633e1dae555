from storefinder.db.models.stores import Stores

from .errors import Forbidden


def assert_owner(store: Stores, acting_user_id: int) -> None:
    """Raise Forbidden unless acting_user_id authored the store. No I/O."""
    if store.author_id != acting_user_id:
        raise Forbidden("You must own a store in order to edit it!")

import pytest

from storefinder.db.models.stores import Stores
from storefinder.services.catalog import assert_owner, Forbidden


def _store(author_id: int) -> Stores:
    return Stores(name="Blue Moon Cafe", slug="blue-moon-cafe", longitude=-0.1, latitude=51.5, author_id=author_id)


class TestAssertOwner:

    def test_author_passes(self):
        assert_owner(_store(author_id=7), 7)

    @pytest.mark.parametrize("acting_user_id", [8, 0, -7, None])
    def test_anyone_else_is_forbidden(self, acting_user_id):
        with pytest.raises(Forbidden):
            assert_owner(_store(author_id=7), acting_user_id)

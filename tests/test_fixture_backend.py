"""
Tests for the fixture backend: loading JSON fixtures and pattern matching.
"""

import asyncio
import json
import time
import pytest

from lightbnb.backends.fixtures import FixtureBookingBackend, load_fixture, like_match
from lightbnb.config import DEFAULT_FIXTURES_DIR
from lightbnb.utils.exceptions import InfrastructureError
from tests.conftest import PropertyFactory, UserFactory


def _write(path, data) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


class TestLoadFixture:
    """Test reading fixture files."""

    def test_mapping_keys_become_ids(self, tmp_path):
        path = tmp_path / "users.json"
        _write(path, {"7": {"name": "A", "email": "a@example.com", "password": "x"}})

        records = load_fixture(path)

        assert records == [{"id": "7", "name": "A", "email": "a@example.com", "password": "x"}]

    def test_array_of_records(self, tmp_path):
        path = tmp_path / "users.json"
        _write(path, [{"id": 1, "name": "A", "email": "a@example.com", "password": "x"}])

        assert load_fixture(path)[0]["id"] == 1

    def test_missing_required_file(self, tmp_path):
        with pytest.raises(InfrastructureError):
            load_fixture(tmp_path / "users.json")

    def test_missing_optional_file(self, tmp_path):
        assert load_fixture(tmp_path / "reservations.json", required=False) == []

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "users.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(InfrastructureError) as exc_info:
            load_fixture(path)

        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "users.json"
        _write(path, "just a string")

        with pytest.raises(InfrastructureError):
            load_fixture(path)


class TestFromDirectory:
    """Test building the backend from fixture directories."""

    @pytest.mark.asyncio
    async def test_packaged_fixtures(self):
        backend = FixtureBookingBackend.from_directory(DEFAULT_FIXTURES_DIR)

        assert len(backend.users) == 4
        assert len(backend.properties) == 6

        user = await backend.get_user_with_email("tristanjacobs@gmail.com")
        assert user is not None
        assert user.id == 1
        assert user.name == "Devin Sanders"

    @pytest.mark.asyncio
    async def test_packaged_fixture_queries(self):
        backend = FixtureBookingBackend.from_directory(DEFAULT_FIXTURES_DIR)

        properties = await backend.get_all_properties({"city": "Vancouver"})
        assert [p.city for p in properties] == ["North Vancouver", "Vancouver"]

        reservations = await backend.get_all_reservations(3)
        assert [r.id for r in reservations] == [4, 1, 5]

    @pytest.mark.asyncio
    async def test_users_and_properties_only(self, tmp_path):
        """Reservation and review files are optional."""
        _write(tmp_path / "users.json", {"1": {"name": "A", "email": "a@example.com", "password": "x"}})
        _write(tmp_path / "properties.json", {"1": PropertyFactory.create_property_data(owner_id=1)})

        backend = FixtureBookingBackend.from_directory(tmp_path)

        assert await backend.get_user_with_id(1) is not None
        assert await backend.get_all_reservations(1) == []
        # No reviews, so nothing survives the rating join
        assert await backend.get_all_properties({}) == []

    def test_invalid_record(self, tmp_path):
        _write(tmp_path / "users.json", {"1": {"name": "A"}})
        _write(tmp_path / "properties.json", {})

        with pytest.raises(InfrastructureError):
            FixtureBookingBackend.from_directory(tmp_path)


class TestFixtureIsolation:
    """Records handed out are copies of the stored rows."""

    @pytest.mark.asyncio
    async def test_mutating_result_does_not_change_table(self, fixture_backend: FixtureBookingBackend):
        created = await fixture_backend.add_user(UserFactory.create_user_data(name="Original"))
        created.name = "Changed"

        user = await fixture_backend.get_user_with_id(created.id)

        assert user.name == "Original"

    @pytest.mark.asyncio
    async def test_concurrent_inserts_get_distinct_ids(self, fixture_backend: FixtureBookingBackend):
        users = await asyncio.gather(*(
            fixture_backend.add_user(UserFactory.create_user_data()) for _ in range(5)
        ))

        assert len({user.id for user in users}) == 5


class TestLikeMatch:
    """Test LIKE pattern matching."""

    def test_substring_match(self):
        assert like_match("couver", "North Vancouver")
        assert not like_match("couver", "Toronto")

    def test_case_insensitive(self):
        assert like_match("VANCOUVER", "Vancouver")

    def test_wildcards(self):
        assert like_match("V_n%r", "Vancouver")
        assert not like_match("V_n%r", "Vn")
        assert not like_match("Van_", "Van")

    def test_segments_in_order(self):
        assert like_match("north%couver", "North Vancouver")
        assert not like_match("couver%north", "North Vancouver")

    def test_empty_and_wildcard_only_patterns_match_everything(self):
        assert like_match("", "Vancouver")
        assert like_match("%%%", "")

    def test_regex_characters_are_literal(self):
        assert like_match("St. John's", "St. John's")
        assert not like_match("St. John's", "Stx John's")
        assert like_match(".*", "a.*b")
        assert not like_match(".*", "ab")

    def test_many_wildcards_stay_fast(self):
        """Matching cost grows with pattern times value length, not exponentially."""
        start = time.perf_counter()

        assert not like_match("%" * 200 + "!", "a" * 5000)
        assert like_match("a%" * 100, "a" * 5000)

        assert time.perf_counter() - start < 1.0

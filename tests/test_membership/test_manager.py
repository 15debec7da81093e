"""Tests for MembershipManager."""

from datetime import date

import pytest
from pydantic import ValidationError

from libraryloans.errors import DuplicateEmail, NotFound, UnknownUser
from libraryloans.membership.schemas import UserCreate, UserResponse


class TestRegistration:
    """Tests for registering members."""

    def test_register_user(self, membership):
        user = membership.register_user(
            UserCreate(name="Paul Ardiente", email="paulandrei@gmail.com", joined=date(2024, 12, 1))
        )

        assert user.id == 1
        assert user.name == "Paul Ardiente"
        assert user.email == "paulandrei@gmail.com"
        assert user.joined == "2024-12-01"

    def test_ids_are_assigned_in_order(self, membership):
        first = membership.register_user(UserCreate(name="A", email="a@example.com"))
        second = membership.register_user(UserCreate(name="B", email="b@example.com"))
        assert second.id == first.id + 1

    def test_joined_defaults_to_today(self, membership):
        user = membership.register_user(UserCreate(name="Bob", email="bob@example.com"))
        assert user.joined == date.today().isoformat()

    def test_email_is_normalized(self, membership):
        user = membership.register_user(UserCreate(name="Bob", email="  Bob@Example.COM "))
        assert user.email == "bob@example.com"

    def test_duplicate_email(self, membership, sample_user):
        with pytest.raises(DuplicateEmail) as exc:
            membership.register_user(UserCreate(name="Other", email="PaulAndrei@gmail.com"))
        assert exc.value.email == "paulandrei@gmail.com"

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            UserCreate(name="Bob", email="not-an-address")

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            UserCreate(name="", email="bob@example.com")


class TestLookup:
    """Tests for reading members."""

    def test_exists(self, membership, sample_user):
        assert membership.exists(sample_user) is True
        assert membership.exists(999) is False

    def test_get_user(self, membership, sample_user):
        user = membership.get_user(sample_user)
        assert user.name == "Paul Ardiente"

    def test_user_response(self, membership, sample_user):
        response = UserResponse.model_validate(membership.get_user(sample_user))
        assert response.joined == date(2024, 12, 1)

    def test_get_user_not_found(self, membership):
        with pytest.raises(UnknownUser) as exc:
            membership.get_user(42)
        assert exc.value.user_id == 42
        assert isinstance(exc.value, NotFound)

    def test_get_user_by_email(self, membership, sample_user):
        user = membership.get_user_by_email("PAULANDREI@gmail.com")
        assert user is not None
        assert user.id == sample_user

    def test_get_user_by_email_not_found(self, membership):
        assert membership.get_user_by_email("nobody@example.com") is None

    def test_list_users(self, membership):
        for name in ["Charlie", "Alice", "Bob"]:
            membership.register_user(UserCreate(name=name, email=f"{name.lower()}@example.com"))

        names = [u.name for u in membership.list_users()]
        assert names == ["Charlie", "Alice", "Bob"]

"""Tests for the credential stores and password hashing."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from errors import DuplicateEmail, ValidationError
from repositories.users import InMemoryUserStore
from schemas import PublicUser
from utils.passwords import hash_password, verify_password


def test_create_hashes_password(user_store) -> None:
    """Test the stored hash is a bcrypt hash, not the plaintext."""
    user = user_store.create("a@x.com", "pw", "A")

    assert user.id is not None
    assert user.password_hash != "pw"
    assert user.password_hash.startswith("$2")
    assert user_store.verify_password("pw", user.password_hash) is True


def test_create_rejects_duplicate_email(user_store) -> None:
    """Test registering the same email twice fails with DuplicateEmail."""
    user_store.create("a@x.com", "pw", "A")

    with pytest.raises(DuplicateEmail):
        user_store.create("a@x.com", "other", "Another A")


def test_email_match_is_case_sensitive(user_store) -> None:
    """Test lookups match the email exactly as stored."""
    user_store.create("a@x.com", "pw", "A")

    assert user_store.find_by_email("a@x.com") is not None
    assert user_store.find_by_email("A@X.COM") is None


def test_find_by_id(user_store) -> None:
    """Test a user can be looked up by the id it was given."""
    user = user_store.create("a@x.com", "pw", "A")

    found = user_store.find_by_id(user.id)

    assert found.email == "a@x.com"
    assert found.name == "A"
    assert user_store.find_by_id(user.id + 100) is None


def test_sequential_ids(user_store) -> None:
    """Test each new user gets a larger id."""
    first = user_store.create("a@x.com", "pw", "A")
    second = user_store.create("b@x.com", "pw", "B")

    assert second.id > first.id
    assert user_store.count() == 2


def test_wrong_password_does_not_verify(user_store) -> None:
    """Test verification fails for a different password."""
    user = user_store.create("a@x.com", "pw", "A")

    assert user_store.verify_password("not-pw", user.password_hash) is False


def test_without_secret_has_no_hash(user_store) -> None:
    """Test the public projection carries no password field."""
    user = user_store.create("a@x.com", "pw", "A")

    public = user_store.without_secret(user)

    assert isinstance(public, PublicUser)
    dumped = public.model_dump(by_alias=True)
    assert dumped["id"] == user.id
    assert dumped["email"] == "a@x.com"
    assert "createdAt" in dumped
    assert not any("password" in key.lower() for key in dumped)


def test_concurrent_registrations_of_one_email() -> None:
    """Test only one of several simultaneous registrations for an email succeeds."""
    store = InMemoryUserStore(bcrypt_rounds=4)
    workers = 8
    barrier = threading.Barrier(workers)

    def register(worker: int):
        barrier.wait()
        try:
            return store.create("race@x.com", "pw", f"User {worker}")
        except DuplicateEmail as exc:
            return exc

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(register, range(workers)))

    created = [result for result in results if not isinstance(result, DuplicateEmail)]
    rejected = [result for result in results if isinstance(result, DuplicateEmail)]
    assert len(created) == 1
    assert len(rejected) == workers - 1
    assert store.count() == 1
    assert store.find_by_email("race@x.com").id == created[0].id


class TestPasswords:
    """bcrypt helpers."""

    def test_hashes_are_salted(self) -> None:
        """Test the same password hashes differently each time."""
        assert hash_password("secret", rounds=4) != hash_password("secret", rounds=4)

    def test_verify_round_trip(self) -> None:
        """Test a hash verifies its own password only."""
        hashed = hash_password("secret", rounds=4)

        assert verify_password("secret", hashed) is True
        assert verify_password("Secret", hashed) is False

    def test_malformed_hash_does_not_verify(self) -> None:
        """Test a stored value that is not a bcrypt hash never matches."""
        assert verify_password("secret", "plaintext-secret") is False

    def test_overlong_password_rejected(self) -> None:
        """Test passwords past bcrypt's 72-byte limit cannot be hashed."""
        with pytest.raises(ValidationError, match="72 bytes"):
            hash_password("x" * 73, rounds=4)

    def test_overlong_password_does_not_verify(self) -> None:
        """Test an over-long password never verifies."""
        hashed = hash_password("x" * 72, rounds=4)

        assert verify_password("x" * 73, hashed) is False

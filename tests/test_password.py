"""
Tests for bcrypt password hashing.
"""

from auth.password import hash_password, verify_password


class TestPasswordHashing:
    def test_hash_is_not_plaintext(self):
        hashed = hash_password("secret123", rounds=4)
        assert hashed != "secret123"
        assert hashed.startswith("$2")

    def test_salt_differs_per_call(self):
        assert hash_password("secret123", rounds=4) != hash_password("secret123", rounds=4)

    def test_cost_factor_is_embedded(self):
        assert hash_password("secret123", rounds=5).split("$")[2] == "05"

    def test_verify_roundtrip(self):
        hashed = hash_password("secret123", rounds=4)
        assert verify_password("secret123", hashed) is True
        assert verify_password("wrong-one", hashed) is False

    def test_malformed_hash_returns_false(self):
        assert verify_password("secret123", "not-a-bcrypt-hash") is False

"""
Tests for registration rules and pagination parsing.
"""

import pytest

from utils.validators import MAX_OFFSET, parse_pagination, validate_registration


class TestValidateRegistration:
    def test_valid_payload(self):
        data = {"name": "Ana", "email": "ana@example.com", "password": "secret123"}
        assert validate_registration(data) == []

    def test_all_failures_reported_in_rule_order(self):
        errors = validate_registration({"name": "  ", "email": "nope", "password": "123"})
        assert [e.field for e in errors] == ["name", "email", "password"]
        assert errors[0].message == "Name is required"
        assert errors[1].message == "Valid email is required"
        assert errors[2].message == "Password must be at least 6 characters"

    def test_missing_fields(self):
        errors = validate_registration({})
        assert len(errors) == 3

    def test_password_value_not_echoed(self):
        errors = validate_registration({"name": "Ana", "email": "ana@example.com", "password": "123"})
        assert errors[0].field == "password"
        assert errors[0].value is None

    def test_password_over_bcrypt_limit(self):
        errors = validate_registration({"name": "Ana", "email": "ana@example.com", "password": "x" * 73})
        assert [e.message for e in errors] == ["Password must be at most 72 bytes"]

    @pytest.mark.parametrize("email", ["a@b.co", "first.last+tag@sub.example.org"])
    def test_accepts_emails(self, email):
        assert validate_registration({"name": "x", "email": email, "password": "123456"}) == []

    @pytest.mark.parametrize("email", ["", "plain", "a@b", "@b.com", "a b@c.com"])
    def test_rejects_emails(self, email):
        errors = validate_registration({"name": "x", "email": email, "password": "123456"})
        assert [e.field for e in errors] == ["email"]


class TestParsePagination:
    def test_defaults(self):
        assert parse_pagination(None, None) == (1, 10)

    def test_numeric_values(self):
        assert parse_pagination("3", "25") == (3, 25)

    @pytest.mark.parametrize("page,limit", [("abc", "x"), ("0", "-5"), ("1.5", "")])
    def test_malformed_values_fall_back(self, page, limit):
        assert parse_pagination(page, limit) == (1, 10)

    def test_limit_capped(self):
        assert parse_pagination("1", "5000", max_limit=100) == (1, 100)

    def test_custom_default_limit(self):
        assert parse_pagination(None, None, default_limit=20) == (1, 20)

    def test_huge_page_clamped_to_bigint_offset(self):
        page, limit = parse_pagination("99999999999999999999", "10")
        assert limit == 10
        assert page == MAX_OFFSET // 10 + 1
        assert (page - 1) * limit <= MAX_OFFSET

    def test_huge_limit_still_capped(self):
        assert parse_pagination("1", "99999999999999999999", max_limit=100) == (1, 100)

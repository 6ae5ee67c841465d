# -*- coding: utf-8 -*-
import pytest

from constants.prompt import normalize_tags
from constants.release import validate_version
from constants.work_item import normalize_type
from utils.exceptions import ValidationError
from utils.validators import check_length, mask_email, parse_bool, validate_email, validate_url


@pytest.mark.parametrize("version", ["1.0.0", "10.20.30", "2.0.0-beta.1", "1.2.3-rc-1"])
def test_valid_versions(version):
    validate_version(version)


@pytest.mark.parametrize("version", ["1.0", "v1.0.0", "1.0.0.0", "1..0", ""])
def test_invalid_versions(version):
    with pytest.raises(ValidationError):
        validate_version(version)


@pytest.mark.parametrize(
    "email, ok",
    [("a@b.co", True), ("first.last+tag@example.org", True), ("no-at.example.com", False), ("a@b", False)],
)
def test_validate_email(email, ok):
    assert validate_email(email) is ok


@pytest.mark.parametrize(
    "email, masked",
    [
        ("alice@example.com", "a***e@example.com"),
        ("ab@example.com", "a*@example.com"),
        ("a@example.com", "a*@example.com"),
    ],
)
def test_mask_email(email, masked):
    assert mask_email(email) == masked


def test_validate_url():
    assert validate_url("https://example.com/x")
    assert validate_url("http://localhost:3000")
    assert not validate_url("ftp://example.com")
    assert not validate_url("")


@pytest.mark.parametrize("raw, expected", [("true", True), ("0", False), ("maybe", None), (None, None)])
def test_parse_bool(raw, expected):
    assert parse_bool(raw) is expected


def test_check_length():
    assert check_length("abc", "Name", 5) == []
    assert check_length("abcdef", "Name", 5) == ["Name cannot exceed 5 characters"]
    assert check_length("", "Name", 5, 1) == ["Name must be at least 1 characters"]


def test_normalize_tags_lowercases_and_dedupes():
    assert normalize_tags([" SQL ", "sql", "Python", "", 3]) == ["sql", "python"]
    assert normalize_tags("a, B ,a") == ["a", "b"]


@pytest.mark.parametrize(
    "raw, expected",
    [("epic", "epic"), ("User Story", "user_story"), ("BUG", "bug"), ("spike", None), (None, None)],
)
def test_normalize_work_item_type(raw, expected):
    assert normalize_type(raw) == expected

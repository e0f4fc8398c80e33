import pytest

from devduel.errors import InvalidInputError
from devduel.utils import extract_battle_usernames, extract_username, require_username


@pytest.mark.parametrize("raw, expected", [
    ("octocat", "octocat"),
    ("  @octocat ", "octocat"),
    ("github.com/octocat", "octocat"),
    ("https://github.com/octocat/", "octocat"),
    ("https://www.github.com/octocat/hello-world?tab=readme", "octocat"),
    ("HTTP://GitHub.com/Mona-Lisa", "Mona-Lisa"),
])
def test_extract_username_accepts_handles_and_profile_urls(raw, expected):
    assert extract_username(raw) == expected


@pytest.mark.parametrize("raw", [
    None, "", "   ", "-octocat", "octocat-", "octo cat", "octo_cat", "https://gitlab.com/octocat", "ünïcode",
])
def test_extract_username_rejects_invalid_input(raw):
    assert extract_username(raw) is None


def test_require_username_enforces_length():
    assert require_username("a" * 39) == "a" * 39

    with pytest.raises(InvalidInputError, match="too long"):
        require_username("a" * 40)


def test_battle_usernames_must_differ_ignoring_case():
    assert extract_battle_usernames("alice", "@bob") == ("alice", "bob")

    with pytest.raises(InvalidInputError, match="battle yourself"):
        extract_battle_usernames("Alice", "github.com/alice")


def test_battle_usernames_are_each_validated():
    with pytest.raises(InvalidInputError):
        extract_battle_usernames("alice", "")

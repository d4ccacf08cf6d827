"""Local-only auth directory."""

from __future__ import annotations

import pytest

from tripbook.domain.enums import Role
from tripbook.domain.exceptions import AuthError, DuplicateUser, RoleMismatch
from tripbook.domain.models import ProfileCompletion
from tripbook.infrastructure.mock_auth import MockAuthService


@pytest.fixture
def auth(store):
    return MockAuthService(store, clock=lambda: 1767225600.5)


def test_signup_creates_and_signs_in(auth, store):
    user = auth.signup("Ada", "ada@example.com", "pw", "pw")
    assert user.id == 1767225600500
    assert user.username == "ada@example.com"
    assert store.current_user() == user
    assert store.find_user_by_email("ada@example.com") == user


@pytest.mark.parametrize(
    "args,message",
    [
        (("", "ada@example.com", "pw", "pw"), "Please fill in all fields"),
        (("Ada", "ada@example.com", "pw", "other"), "Passwords do not match"),
    ],
)
def test_signup_validation(auth, args, message):
    with pytest.raises(AuthError, match=message):
        auth.signup(*args)


def test_signup_duplicate_email(auth):
    auth.signup("Ada", "ada@example.com", "pw", "pw")
    with pytest.raises(DuplicateUser):
        auth.signup("Other", "ada@example.com", "pw2", "pw2")


def test_login_checks_credentials_and_role(auth, store):
    auth.signup("Gus", "gus@example.com", "pw", "pw", role=Role.GUIDE)
    auth.logout()
    assert store.current_user() is None

    with pytest.raises(AuthError, match="Invalid email or password"):
        auth.login("gus@example.com", "wrong", Role.GUIDE)
    with pytest.raises(RoleMismatch) as excinfo:
        auth.login("gus@example.com", "pw", Role.USER)
    assert excinfo.value.registered_role == "guide"
    assert store.current_user() is None

    user = auth.login("gus@example.com", "pw", Role.GUIDE)
    assert store.current_user() == user


def test_complete_profile_updates_directory_and_session(auth, store):
    auth.signup("Ada", "ada@example.com", "pw", "pw")
    updated = auth.complete_profile(ProfileCompletion(phone="+44 20 7946 0000", travel_style="slow"))

    assert updated.phone == "+44 20 7946 0000"
    assert updated.profile_completion_prompt_shown is True
    assert store.current_user() == updated
    assert store.find_user_by_email("ada@example.com") == updated


def test_mark_prompt_shown_requires_session(auth):
    with pytest.raises(AuthError):
        auth.mark_prompt_shown()
    auth.signup("Ada", "ada@example.com", "pw", "pw")
    assert auth.mark_prompt_shown().profile_completion_prompt_shown is True

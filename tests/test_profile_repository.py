"""Tests for the profile helpers used to authorize feed viewers."""

from __future__ import annotations

import pytest

from marketplace_feed.infrastructure.models import ProfileModel
from marketplace_feed.infrastructure.repositories import ProfileRepository


def test_only_active_admins_are_authorized(session_factory, seed):
    admin = seed.add(ProfileModel, first_name="Ada", role="admin")
    super_admin = seed.add(ProfileModel, first_name="Sue", role="Super_Admin")
    suspended = seed.add(ProfileModel, first_name="Sid", role="admin", status="suspended")
    seeker = seed.add(ProfileModel, first_name="Sam", role="seeker")

    with session_factory() as session:
        repository = ProfileRepository(session)
        assert repository.is_admin(admin) is True
        assert repository.is_admin(super_admin) is True
        assert repository.is_admin(suspended) is False
        assert repository.is_admin(seeker) is False
        assert repository.is_admin("missing") is False
        assert repository.get_role(seeker) == "seeker"


def test_create_persists_an_active_profile(session_factory):
    with session_factory() as session:
        profile_id = ProfileRepository(session).create(
            first_name=" Ada ", last_name="", role="ADMIN"
        )

    with session_factory() as session:
        profile = session.get(ProfileModel, profile_id)
        assert profile.first_name == "Ada"
        assert profile.last_name is None
        assert profile.role == "admin"
        assert profile.status == "active"
        assert ProfileRepository(session).is_admin(profile_id) is True


@pytest.mark.parametrize("fields", [{"first_name": "  "}, {"first_name": "Ada", "role": ""}])
def test_create_validates_input(session_factory, fields):
    with session_factory() as session:
        with pytest.raises(ValueError):
            ProfileRepository(session).create(**fields)

"""Tests for visibility and moderation checks."""

from unittest.mock import Mock

import pytest

from src.db.models import Episode, Podcast, User
from src.services.access import (
    can_access_episode,
    can_access_podcast,
    can_view_episode,
    can_view_podcast,
    is_owner_or_admin,
    passes_moderation,
)


def _user(user_id, role="LISTENER"):
    return User(id=user_id, username=user_id, email=f"{user_id}@example.com", role=role)


@pytest.fixture
def owner():
    return _user("owner", role="CREATOR")


@pytest.fixture
def admin():
    return _user("admin", role="ADMIN")


@pytest.fixture
def listener():
    return _user("listener")


@pytest.fixture
def repository():
    """Mock repository with no invitations."""
    repo = Mock()
    repo.has_invitation.return_value = False
    return repo


def _podcast(status="APPROVED", visibility="PUBLIC"):
    return Podcast(id="p1", owner_id="owner", status=status, visibility=visibility)


def _episode(status="APPROVED", visibility="PUBLIC"):
    return Episode(id="e1", podcast_id="p1", status=status, visibility=visibility)


class TestOwnership:
    def test_owner_and_admin(self, owner, admin, listener):
        podcast = _podcast()

        assert is_owner_or_admin(podcast, owner) is True
        assert is_owner_or_admin(podcast, admin) is True
        assert is_owner_or_admin(podcast, listener) is False
        assert is_owner_or_admin(podcast, None) is False

    def test_moderation_gate(self, owner, listener):
        """Unapproved content is only visible to owner and admins."""
        podcast = _podcast()

        assert passes_moderation("APPROVED", podcast, None) is True
        assert passes_moderation("PENDING_APPROVAL", podcast, listener) is False
        assert passes_moderation("DRAFT", podcast, owner) is True


class TestPodcastVisibility:
    """Tests for the podcast visibility gate."""

    def test_public_podcast_visible_to_anonymous(self, repository):
        assert can_view_podcast(_podcast(), None, repository) is True

    @pytest.mark.parametrize("visibility", ["UNLISTED", "PRIVATE"])
    def test_non_public_hidden_from_anonymous(self, repository, visibility):
        assert can_access_podcast(_podcast(visibility=visibility), None, repository) is False
        repository.has_invitation.assert_not_called()

    def test_private_visible_with_invitation(self, repository, listener):
        """Test that an invitation opens a private podcast."""
        repository.has_invitation.return_value = True

        assert can_view_podcast(_podcast(visibility="PRIVATE"), listener, repository) is True
        repository.has_invitation.assert_called_once_with(
            "listener", "listener@example.com", podcast_id="p1"
        )

    def test_private_hidden_without_invitation(self, repository, listener):
        assert can_view_podcast(_podcast(visibility="PRIVATE"), listener, repository) is False

    def test_owner_sees_own_private_draft(self, repository, owner):
        podcast = _podcast(status="DRAFT", visibility="PRIVATE")

        assert can_view_podcast(podcast, owner, repository) is True

    def test_invited_user_cannot_see_unapproved(self, repository, listener):
        """Test that an invitation does not bypass moderation."""
        repository.has_invitation.return_value = True
        podcast = _podcast(status="PENDING_APPROVAL", visibility="PRIVATE")

        assert can_view_podcast(podcast, listener, repository) is False

    def test_admin_sees_everything(self, repository, admin):
        podcast = _podcast(status="REJECTED", visibility="PRIVATE")

        assert can_view_podcast(podcast, admin, repository) is True


class TestEpisodeVisibility:
    """Tests for the episode visibility gate."""

    def test_public_episode_of_public_podcast(self, repository):
        assert can_view_episode(_episode(), _podcast(), None, repository) is True

    def test_episode_hidden_when_podcast_private(self, repository, listener):
        """Test that a public episode inherits its podcast's restriction."""
        assert can_access_episode(_episode(), _podcast(visibility="PRIVATE"), listener, repository) is False

    def test_private_episode_needs_episode_invitation(self, repository, listener):
        """Test that a private episode needs its own invitation."""
        def has_invitation(user_id, email, podcast_id=None, episode_id=None):
            return episode_id == "e1"

        repository.has_invitation.side_effect = has_invitation

        assert can_view_episode(_episode(visibility="PRIVATE"), _podcast(), listener, repository) is True

    def test_private_episode_hidden_from_anonymous(self, repository):
        assert can_view_episode(_episode(visibility="PRIVATE"), _podcast(), None, repository) is False

    def test_pending_episode_hidden(self, repository, listener, owner):
        episode = _episode(status="PENDING_APPROVAL")

        assert can_view_episode(episode, _podcast(), listener, repository) is False
        assert can_view_episode(episode, _podcast(), owner, repository) is True

    @pytest.mark.parametrize("podcast_status", ["DRAFT", "PENDING_APPROVAL", "REJECTED"])
    def test_approved_episode_of_unapproved_podcast(self, repository, listener, owner, admin, podcast_status):
        """Test that a podcast's moderation status gates its episodes too."""
        podcast = _podcast(status=podcast_status)

        assert can_view_episode(_episode(), podcast, None, repository) is False
        assert can_view_episode(_episode(), podcast, listener, repository) is False
        assert can_view_episode(_episode(), podcast, owner, repository) is True
        assert can_view_episode(_episode(), podcast, admin, repository) is True

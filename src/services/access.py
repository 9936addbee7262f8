"""
Visibility and moderation checks for podcasts and episodes.

Two independent gates decide whether content is shown to a caller:

- Visibility: PUBLIC content is open to everyone. UNLISTED and PRIVATE
  content is limited to the owner, admins and invited users.
- Moderation: only APPROVED content is shown, except to its owner and
  to admins. Episodes also need their podcast approved.
"""

import logging
from typing import Optional

from src.db.models import Episode, Podcast, User
from src.db.repository import PodcastHubRepositoryInterface

logger = logging.getLogger(__name__)


def _is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == "ADMIN"


def is_owner_or_admin(podcast: Podcast, user: Optional[User]) -> bool:
    """True when the user owns the podcast or is an admin."""
    if user is None:
        return False
    return podcast.owner_id == user.id or _is_admin(user)


def passes_moderation(status: str, podcast: Podcast, user: Optional[User]) -> bool:
    """Approved content is visible to all; anything else only to its owner and admins."""
    return status == "APPROVED" or is_owner_or_admin(podcast, user)


def can_access_podcast(
    podcast: Podcast,
    user: Optional[User],
    repository: PodcastHubRepositoryInterface,
) -> bool:
    """
    Check the visibility gate for a podcast.

    Args:
        podcast: The podcast being requested.
        user: The caller, or None for anonymous visitors.
        repository: Used to look up invitations.

    Returns:
        bool: True if the caller may see the podcast.
    """
    if is_owner_or_admin(podcast, user):
        return True
    if podcast.visibility == "PUBLIC":
        return True
    if user is None:
        return False
    return repository.has_invitation(user.id, user.email, podcast_id=podcast.id)


def can_access_episode(
    episode: Episode,
    podcast: Podcast,
    user: Optional[User],
    repository: PodcastHubRepositoryInterface,
) -> bool:
    """
    Check the visibility gate for an episode.

    The caller first needs access to the parent podcast. Non-public
    episodes additionally require an invitation to the episode itself.
    """
    if is_owner_or_admin(podcast, user):
        return True
    if not can_access_podcast(podcast, user, repository):
        return False
    if episode.visibility == "PUBLIC":
        return True
    if user is None:
        return False
    return repository.has_invitation(user.id, user.email, episode_id=episode.id)


def can_view_podcast(
    podcast: Podcast,
    user: Optional[User],
    repository: PodcastHubRepositoryInterface,
) -> bool:
    """Both gates for a podcast."""
    return passes_moderation(podcast.status, podcast, user) and can_access_podcast(
        podcast, user, repository
    )


def can_view_episode(
    episode: Episode,
    podcast: Podcast,
    user: Optional[User],
    repository: PodcastHubRepositoryInterface,
) -> bool:
    """Both gates for an episode. An unapproved podcast hides all its episodes."""
    return (
        passes_moderation(podcast.status, podcast, user)
        and passes_moderation(episode.status, podcast, user)
        and can_access_episode(episode, podcast, user, repository)
    )

"""
RSS 2.0 feed generation with iTunes extensions.

Feeds are assembled line by line with every interpolated value escaped
for XML.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import format_datetime
from typing import List, Optional
from xml.sax import saxutils

from src.db.models import Episode, Podcast, User, utcnow

logger = logging.getLogger(__name__)

# Escape quotes too so values are safe inside attributes
_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;"}


@dataclass
class FeedEpisode:
    """An episode with its resolved audio and artwork URLs."""

    episode: Episode
    audio_url: str
    cover_art_url: Optional[str] = None


def escape_xml(value: Optional[str]) -> str:
    if not value:
        return ""
    return saxutils.escape(value, _ATTR_ENTITIES)


def format_rfc822(value: datetime) -> str:
    """Format a datetime as RFC 822 in UTC, e.g. 'Sun, 05 Jan 2025 10:00:00 +0000'."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return format_datetime(value.astimezone(UTC))


def format_duration(seconds: Optional[int]) -> str:
    """Format a duration in seconds as HH:MM:SS."""
    seconds = max(int(seconds or 0), 0)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def generate_rss_feed(
    podcast: Podcast,
    owner: User,
    episodes: List[FeedEpisode],
    feed_url: str,
    site_url: str,
    cover_art_url: Optional[str] = None,
) -> str:
    """
    Build the RSS document for a podcast.

    Args:
        podcast: The podcast being published.
        owner: Podcast owner, used for author and editor fields.
        episodes: Episodes to include, newest first.
        feed_url: Absolute URL of this feed (atom:link self).
        site_url: Public site URL used to build page links.
        cover_art_url: Resolved podcast cover art, if any.

    Returns:
        str: The XML document.
    """
    podcast_link = f"{site_url}/podcast/{podcast.id}"
    if episodes:
        last_build = format_rfc822(episodes[0].episode.published_at)
    else:
        last_build = format_rfc822(utcnow())
    editor = f"{escape_xml(owner.email)} ({escape_xml(owner.username)})"

    rss_lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" '
        'xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd" '
        'xmlns:atom="http://www.w3.org/2005/Atom" '
        'xmlns:content="http://purl.org/rss/1.0/modules/content/">',
        '<channel>',
        f'<title>{escape_xml(podcast.title)}</title>',
        f'<link>{escape_xml(podcast_link)}</link>',
        f'<description>{escape_xml(podcast.description)}</description>',
        f'<language>{escape_xml(podcast.language)}</language>',
        f'<lastBuildDate>{last_build}</lastBuildDate>',
        f'<atom:link href="{escape_xml(feed_url)}" rel="self" type="application/rss+xml"/>',
        f'<managingEditor>{editor}</managingEditor>',
        f'<webMaster>{editor}</webMaster>',
        f'<itunes:author>{escape_xml(owner.username)}</itunes:author>',
        f'<itunes:summary>{escape_xml(podcast.description)}</itunes:summary>',
        '<itunes:owner>',
        f'<itunes:name>{escape_xml(owner.username)}</itunes:name>',
        f'<itunes:email>{escape_xml(owner.email)}</itunes:email>',
        '</itunes:owner>',
    ]

    if cover_art_url:
        rss_lines.extend([
            f'<itunes:image href="{escape_xml(cover_art_url)}"/>',
            '<image>',
            f'<url>{escape_xml(cover_art_url)}</url>',
            f'<title>{escape_xml(podcast.title)}</title>',
            f'<link>{escape_xml(podcast_link)}</link>',
            '</image>',
        ])

    rss_lines.extend([
        f'<itunes:category text="{escape_xml(podcast.category)}"/>',
        '<itunes:explicit>no</itunes:explicit>',
    ])

    for item in episodes:
        episode = item.episode
        episode_link = f"{podcast_link}#episode-{episode.id}"
        rss_lines.extend([
            '<item>',
            f'<title>{escape_xml(episode.title)}</title>',
            f'<link>{escape_xml(episode_link)}</link>',
            f'<description>{escape_xml(episode.notes)}</description>',
            f'<pubDate>{format_rfc822(episode.published_at)}</pubDate>',
            f'<guid isPermaLink="true">{escape_xml(episode_link)}</guid>',
            f'<enclosure url="{escape_xml(item.audio_url)}" type="audio/mpeg" '
            f'length="{episode.audio_file_size or 0}"/>',
        ])
        if item.cover_art_url:
            rss_lines.append(f'<itunes:image href="{escape_xml(item.cover_art_url)}"/>')
        rss_lines.extend([
            f'<itunes:title>{escape_xml(episode.title)}</itunes:title>',
            f'<itunes:summary>{escape_xml(episode.notes)}</itunes:summary>',
            f'<itunes:duration>{format_duration(episode.duration)}</itunes:duration>',
            '<itunes:explicit>no</itunes:explicit>',
            '</item>',
        ])

    rss_lines.extend(['</channel>', '</rss>'])

    logger.debug(f"Generated RSS feed for podcast {podcast.id} with {len(episodes)} episodes")
    return "\n".join(rss_lines)


def generate_error_feed(message: str) -> str:
    """Small XML document returned in place of a feed when it cannot be served."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<error>{escape_xml(message)}</error>'
    )

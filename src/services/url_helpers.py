"""
URL generation for share links, embeds and feeds.

All helpers take the site URL (scheme and host, no trailing slash) as
their first argument so that links stay consistent across endpoints.
"""

import html

from fastapi import Request

DEFAULT_HOST = "localhost:5000"


def get_site_url(request: Request, base_url: str = "") -> str:
    """
    Determine the public site URL.

    A configured base URL takes precedence. Otherwise the scheme is https
    when the request arrived over TLS or through a proxy reporting
    `x-forwarded-proto: https`, and the host comes from the Host header.
    """
    if base_url:
        return base_url.rstrip("/")

    secure = request.url.scheme == "https"
    forwarded = request.headers.get("x-forwarded-proto", "")
    protocol = "https" if secure or forwarded == "https" else "http"
    host = request.headers.get("host") or DEFAULT_HOST
    return f"{protocol}://{host}"


def get_episode_canonical_url(site_url: str, episode_id: str) -> str:
    return f"{site_url}/episode/{episode_id}"


def get_episode_share_url(site_url: str, episode_id: str) -> str:
    return get_episode_canonical_url(site_url, episode_id)


def get_episode_embed_url(site_url: str, episode_id: str) -> str:
    return f"{site_url}/embed/episode/{episode_id}"


def get_podcast_url(site_url: str, podcast_id: str) -> str:
    return f"{site_url}/podcast/{podcast_id}"


def get_podcast_rss_url(site_url: str, podcast_id: str) -> str:
    return f"{site_url}/api/podcasts/{podcast_id}/rss"


def escape_html_attribute(value: str) -> str:
    """Escape &, <, >, double and single quotes for use inside an HTML attribute."""
    return html.escape(value, quote=True).replace("&#x27;", "&#039;")


def get_embed_iframe_code(embed_url: str, episode_title: str) -> str:
    """Build the iframe snippet users paste to embed an episode player."""
    safe_url = escape_html_attribute(embed_url)
    safe_title = escape_html_attribute(episode_title)
    return (
        f'<iframe src="{safe_url}" width="100%" height="200" frameborder="0" '
        f'allow="autoplay; clipboard-write" loading="lazy" title="{safe_title}"></iframe>'
    )


def episode_links(site_url: str, episode_id: str, episode_title: str) -> dict:
    """All share and embed URLs for an episode, keyed as the API returns them."""
    embed_url = get_episode_embed_url(site_url, episode_id)
    return {
        "canonicalUrl": get_episode_canonical_url(site_url, episode_id),
        "shareUrl": get_episode_share_url(site_url, episode_id),
        "embedUrl": embed_url,
        "embedCode": get_embed_iframe_code(embed_url, episode_title),
    }

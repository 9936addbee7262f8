"""Initial schema for users, podcasts, episodes, playlists and platform config

Revision ID: 001
Revises:
Create Date: 2025-01-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('username', sa.String(64), unique=True, nullable=False),
        sa.Column('email', sa.String(320), unique=True, nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(32), nullable=False, server_default='LISTENER'),
        sa.Column('bio', sa.Text, nullable=True),
        sa.Column('avatar_url', sa.String(2048), nullable=True),
        sa.Column('website', sa.String(2048), nullable=True),
        sa.Column('requires_approval', sa.Boolean, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        sa.Column('email_verified', sa.Boolean, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'podcasts',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('owner_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('cover_art_url', sa.String(2048), nullable=True),
        sa.Column('cover_art_asset_id', sa.String(36), nullable=True),
        sa.Column('category', sa.String(128), server_default='Technology'),
        sa.Column('language', sa.String(35), server_default='es'),
        sa.Column('status', sa.String(32), nullable=False, server_default='APPROVED'),
        sa.Column('visibility', sa.String(32), nullable=False, server_default='PUBLIC'),
        sa.Column('approved_at', sa.DateTime, nullable=True),
        sa.Column('approved_by', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_podcasts_owner_id', 'podcasts', ['owner_id'])
    op.create_index('ix_podcasts_status', 'podcasts', ['status'])

    op.create_table(
        'episodes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('podcast_id', sa.String(36), sa.ForeignKey('podcasts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('notes', sa.Text, nullable=False),
        sa.Column('cover_art_url', sa.String(2048), nullable=True),
        sa.Column('cover_art_asset_id', sa.String(36), nullable=True),
        sa.Column('audio_url', sa.String(2048), nullable=True),
        sa.Column('audio_asset_id', sa.String(36), nullable=True),
        sa.Column('audio_file_size', sa.BigInteger, nullable=True),
        sa.Column('duration', sa.Integer, server_default='0'),
        sa.Column('status', sa.String(32), nullable=False, server_default='APPROVED'),
        sa.Column('visibility', sa.String(32), nullable=False, server_default='PUBLIC'),
        sa.Column('approved_at', sa.DateTime, nullable=True),
        sa.Column('approved_by', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('published_at', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_episodes_podcast_id', 'episodes', ['podcast_id'])
    op.create_index('ix_episodes_status', 'episodes', ['status'])
    op.create_index('ix_episodes_published_at', 'episodes', ['published_at'])

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('podcast_id', sa.String(36), sa.ForeignKey('podcasts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', 'podcast_id', name='uq_subscription_user_podcast'),
    )
    op.create_index('ix_subscriptions_user_id', 'subscriptions', ['user_id'])

    op.create_table(
        'content_invitations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('podcast_id', sa.String(36), sa.ForeignKey('podcasts.id', ondelete='CASCADE'), nullable=True),
        sa.Column('episode_id', sa.String(36), sa.ForeignKey('episodes.id', ondelete='CASCADE'), nullable=True),
        sa.Column('invited_by', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('expires_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_content_invitations_email', 'content_invitations', ['email'])
    op.create_index('ix_content_invitations_podcast_id', 'content_invitations', ['podcast_id'])
    op.create_index('ix_content_invitations_episode_id', 'content_invitations', ['episode_id'])

    op.create_table(
        'playlists',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('is_public', sa.Boolean, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_playlists_user_id', 'playlists', ['user_id'])

    op.create_table(
        'playlist_episodes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('playlist_id', sa.String(36), sa.ForeignKey('playlists.id', ondelete='CASCADE'), nullable=False),
        sa.Column('episode_id', sa.String(36), sa.ForeignKey('episodes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer, nullable=False, server_default='0'),
        sa.Column('added_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('playlist_id', 'episode_id', name='uq_playlist_episode'),
    )

    op.create_table(
        'email_config',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('smtp_host', sa.String(255), nullable=False),
        sa.Column('smtp_port', sa.Integer, nullable=False, server_default='587'),
        sa.Column('smtp_secure', sa.Boolean, server_default=sa.false()),
        sa.Column('smtp_user', sa.String(255), nullable=False),
        sa.Column('smtp_password', sa.String(255), nullable=False),
        sa.Column('from_email', sa.String(320), nullable=False),
        sa.Column('from_name', sa.String(255), server_default='PodcastHub'),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )

    op.create_table(
        'drive_config',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('service_account_email', sa.String(320), nullable=False),
        sa.Column('service_account_key', sa.Text, nullable=False),
        sa.Column('folder_id_images', sa.String(255), nullable=False),
        sa.Column('folder_id_audio', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )

    op.create_table(
        'media_assets',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('owner_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('podcast_id', sa.String(36), sa.ForeignKey('podcasts.id', ondelete='CASCADE'), nullable=True),
        sa.Column('episode_id', sa.String(36), sa.ForeignKey('episodes.id', ondelete='CASCADE'), nullable=True),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('storage_provider', sa.String(32), server_default='LOCAL'),
        sa.Column('storage_key', sa.String(1024), nullable=False),
        sa.Column('public_url', sa.String(2048), nullable=True),
        sa.Column('mime_type', sa.String(128), nullable=False),
        sa.Column('size_bytes', sa.BigInteger, nullable=False),
        sa.Column('checksum', sa.String(128), nullable=True),
        sa.Column('visibility', sa.String(32), server_default='PUBLIC'),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_media_assets_owner_id', 'media_assets', ['owner_id'])
    op.create_index('ix_media_assets_podcast_id', 'media_assets', ['podcast_id'])
    op.create_index('ix_media_assets_episode_id', 'media_assets', ['episode_id'])


def downgrade() -> None:
    op.drop_table('media_assets')
    op.drop_table('drive_config')
    op.drop_table('email_config')
    op.drop_table('playlist_episodes')
    op.drop_table('playlists')
    op.drop_table('content_invitations')
    op.drop_table('subscriptions')
    op.drop_table('episodes')
    op.drop_table('podcasts')
    op.drop_table('users')

"""Tests for media asset routes."""

import pytest

from src.web.media_routes import router
from src.web.models import MediaAssetCreateRequest


@pytest.fixture
def client(make_client):
    return make_client(router)


@pytest.fixture
def creator(make_user):
    return make_user(role="CREATOR")


def _asset_body(**overrides):
    body = {
        "type": "COVER_ART",
        "storageKey": "covers/show.png",
        "publicUrl": "https://cdn.example.com/covers/show.png",
        "mimeType": "image/png",
        "sizeBytes": 2048,
    }
    body.update(overrides)
    return body


class TestMediaAssetCreateRequest:
    def test_mime_type_must_match_type(self):
        with pytest.raises(ValueError):
            MediaAssetCreateRequest.model_validate(_asset_body(mimeType="audio/mpeg"))

    def test_audio_asset(self):
        request = MediaAssetCreateRequest.model_validate(
            _asset_body(type="EPISODE_AUDIO", mimeType="audio/mpeg", storageKey="a.mp3")
        )
        assert request.storage_provider == "LOCAL"


class TestCreateMediaAsset:
    """Tests for POST /api/media-assets."""

    def test_create(self, client, creator, make_podcast, auth_headers):
        podcast = make_podcast(creator)

        response = client.post(
            "/api/media-assets",
            json=_asset_body(podcastId=podcast.id),
            headers=auth_headers(creator),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["ownerId"] == creator.id
        assert data["podcastId"] == podcast.id
        assert data["publicUrl"] == "https://cdn.example.com/covers/show.png"
        assert "storageKey" not in data

    def test_someone_elses_podcast(self, client, creator, make_user, make_podcast, auth_headers):
        podcast = make_podcast(creator)
        stranger = make_user()

        response = client.post(
            "/api/media-assets",
            json=_asset_body(podcastId=podcast.id),
            headers=auth_headers(stranger),
        )

        assert response.status_code == 403

    def test_someone_elses_episode(self, client, creator, make_user, make_podcast, make_episode, auth_headers):
        episode = make_episode(make_podcast(creator))
        stranger = make_user()

        response = client.post(
            "/api/media-assets",
            json=_asset_body(type="EPISODE_AUDIO", mimeType="audio/mpeg", episodeId=episode.id),
            headers=auth_headers(stranger),
        )

        assert response.status_code == 403

    def test_invalid_body(self, client, creator, auth_headers):
        response = client.post(
            "/api/media-assets",
            json=_asset_body(sizeBytes=-1),
            headers=auth_headers(creator),
        )

        assert response.status_code == 400


class TestReadAndDelete:
    """Tests for GET and DELETE /api/media-assets/{id}."""

    @pytest.fixture
    def private_asset(self, repository, creator):
        return repository.create_media_asset(
            owner_id=creator.id,
            type="EPISODE_AUDIO",
            storage_key="audio/secret.mp3",
            mime_type="audio/mpeg",
            size_bytes=10,
            visibility="PRIVATE",
        )

    def test_owner_reads_private(self, client, creator, private_asset, auth_headers):
        response = client.get(f"/api/media-assets/{private_asset.id}", headers=auth_headers(creator))

        assert response.status_code == 200
        assert response.json()["visibility"] == "PRIVATE"

    def test_private_hidden_from_others(self, client, make_user, private_asset, auth_headers):
        stranger = make_user()

        response = client.get(f"/api/media-assets/{private_asset.id}", headers=auth_headers(stranger))

        assert response.status_code == 404

    def test_delete_by_owner(self, client, repository, creator, private_asset, auth_headers):
        response = client.delete(f"/api/media-assets/{private_asset.id}", headers=auth_headers(creator))

        assert response.status_code == 204
        assert repository.get_media_asset(private_asset.id) is None

    def test_delete_by_other(self, client, make_user, private_asset, auth_headers):
        stranger = make_user()

        response = client.delete(f"/api/media-assets/{private_asset.id}", headers=auth_headers(stranger))

        assert response.status_code == 403

    def test_admin_deletes(self, client, make_user, private_asset, auth_headers):
        admin = make_user(role="ADMIN")

        response = client.delete(f"/api/media-assets/{private_asset.id}", headers=auth_headers(admin))

        assert response.status_code == 204

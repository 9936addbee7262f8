"""Tests for web user routes module."""

import pytest

from src.web.auth import hash_password, verify_password
from src.web.models import PasswordChangeRequest, ProfileUpdateRequest
from src.web.user_routes import router


@pytest.fixture
def client(make_client):
    return make_client(router)


class TestProfileUpdateRequest:
    """Tests for ProfileUpdateRequest validation."""

    def test_partial_request(self):
        request = ProfileUpdateRequest(bio="Hi")
        assert request.bio == "Hi"
        assert request.username is None

    def test_camel_case_aliases(self):
        request = ProfileUpdateRequest.model_validate({"avatarUrl": "https://img.example.com/a.png"})
        assert request.avatar_url == "https://img.example.com/a.png"

    def test_invalid_website(self):
        with pytest.raises(ValueError):
            ProfileUpdateRequest(website="not a url")

    def test_empty_website_allowed(self):
        assert ProfileUpdateRequest(website="").website == ""

    def test_short_username(self):
        with pytest.raises(ValueError):
            ProfileUpdateRequest(username="ab")

    def test_bio_too_long(self):
        with pytest.raises(ValueError):
            ProfileUpdateRequest(bio="x" * 501)

    def test_new_password_length(self):
        with pytest.raises(ValueError):
            PasswordChangeRequest(current_password="old", new_password="short")


class TestMyContent:
    """Tests for /api/my-podcasts and /api/library."""

    def test_my_podcasts_includes_every_status(self, client, make_user, make_podcast, make_episode, auth_headers):
        creator = make_user(role="CREATOR")
        other = make_user(role="CREATOR")
        approved = make_podcast(creator, title="Live")
        make_podcast(creator, title="Draft", status="DRAFT")
        make_podcast(other, title="Not mine")
        make_episode(approved)
        make_episode(approved)

        data = client.get("/api/my-podcasts", headers=auth_headers(creator)).json()

        counts = {p["title"]: p["episodeCount"] for p in data}
        assert counts == {"Live": 2, "Draft": 0}

    def test_library(self, client, repository, make_user, make_podcast, auth_headers):
        creator = make_user(role="CREATOR")
        listener = make_user(role="LISTENER")
        followed = make_podcast(creator)
        make_podcast(creator)
        repository.subscribe(listener.id, followed.id)

        data = client.get("/api/library", headers=auth_headers(listener)).json()

        assert [p["id"] for p in data] == [followed.id]
        assert data[0]["isSubscribed"] is True

    def test_requires_login(self, client):
        assert client.get("/api/library").status_code == 401
        assert client.get("/api/my-podcasts").status_code == 401


class TestProfile:
    """Tests for /api/profile."""

    def test_get_profile(self, client, make_user, auth_headers):
        user = make_user(bio="About me")

        data = client.get("/api/profile", headers=auth_headers(user)).json()

        assert data["id"] == user.id
        assert data["bio"] == "About me"
        assert "passwordHash" not in data

    def test_update_profile(self, client, make_user, auth_headers):
        user = make_user()

        response = client.patch(
            "/api/profile",
            json={"username": "renamed", "bio": "New bio", "website": "https://me.example.com"},
            headers=auth_headers(user),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "renamed"
        assert data["bio"] == "New bio"
        assert data["website"] == "https://me.example.com"

    def test_username_taken(self, client, make_user, auth_headers):
        make_user(username="taken")
        user = make_user()

        response = client.patch(
            "/api/profile", json={"username": "taken"}, headers=auth_headers(user)
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Username already taken"}

    def test_email_in_use(self, client, make_user, auth_headers):
        make_user(email="used@example.com")
        user = make_user()

        response = client.patch(
            "/api/profile", json={"email": "used@example.com"}, headers=auth_headers(user)
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Email already in use"}

    def test_keeping_own_username(self, client, make_user, auth_headers):
        user = make_user(username="same")

        response = client.patch(
            "/api/profile", json={"username": "same"}, headers=auth_headers(user)
        )

        assert response.status_code == 200

    def test_null_username_ignored(self, client, make_user, auth_headers):
        user = make_user(username="keepme")

        response = client.patch(
            "/api/profile", json={"username": None, "bio": "x"}, headers=auth_headers(user)
        )

        assert response.status_code == 200
        assert response.json()["username"] == "keepme"


class TestChangePassword:
    """Tests for PATCH /api/profile/password."""

    @pytest.fixture
    def user(self, repository):
        return repository.create_user(
            username="pw", email="pw@example.com", password_hash=hash_password("old-password")
        )

    def test_change_password(self, client, repository, user, auth_headers):
        response = client.patch(
            "/api/profile/password",
            json={"currentPassword": "old-password", "newPassword": "new-password"},
            headers=auth_headers(user),
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Password updated successfully"}
        assert verify_password("new-password", repository.get_user(user.id).password_hash)

    def test_wrong_current_password(self, client, user, auth_headers):
        response = client.patch(
            "/api/profile/password",
            json={"currentPassword": "guess", "newPassword": "new-password"},
            headers=auth_headers(user),
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Current password is incorrect"}

"""Tests for admin routes: stats, user management and moderation."""

import uuid

import pytest

from src.web.admin_routes import router


@pytest.fixture
def client(make_client):
    return make_client(router)


@pytest.fixture
def admin(make_user):
    return make_user(role="ADMIN")


@pytest.fixture
def headers(admin, auth_headers):
    return auth_headers(admin)


class TestAdminAccess:
    """Tests that every admin route is locked down."""

    def test_requires_login(self, client):
        response = client.get("/api/admin/stats")

        assert response.status_code == 401

    def test_requires_admin_role(self, client, make_user, auth_headers):
        creator = make_user(role="CREATOR")

        response = client.get("/api/admin/users", headers=auth_headers(creator))

        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden - Admin access required"}


class TestStats:
    def test_stats(self, client, headers, make_user, make_podcast):
        creator = make_user(role="CREATOR")
        make_podcast(creator, status="PENDING_APPROVAL")

        data = client.get("/api/admin/stats", headers=headers).json()

        assert data["users"]["total"] == 2
        assert data["users"]["byRole"]["ADMIN"] == 1
        assert data["podcasts"]["byStatus"]["PENDING_APPROVAL"] == 1


class TestUserManagement:
    """Tests for /api/admin/users endpoints."""

    def test_list_users(self, client, headers, make_user):
        make_user()

        data = client.get("/api/admin/users", headers=headers).json()

        assert len(data) == 2
        assert all("passwordHash" not in user for user in data)

    def test_change_role(self, client, headers, make_user):
        user = make_user(role="LISTENER")

        response = client.patch(
            f"/api/admin/users/{user.id}/role", json={"role": "CREATOR"}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["role"] == "CREATOR"

    def test_cannot_demote_last_admin(self, client, admin, headers):
        response = client.patch(
            f"/api/admin/users/{admin.id}/role", json={"role": "LISTENER"}, headers=headers
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Cannot demote the last admin"}

    def test_invalid_role(self, client, headers, make_user):
        user = make_user()

        response = client.patch(
            f"/api/admin/users/{user.id}/role", json={"role": "OWNER"}, headers=headers
        )

        assert response.status_code == 400

    def test_unknown_user(self, client, headers):
        response = client.patch(
            "/api/admin/users/missing/role", json={"role": "CREATOR"}, headers=headers
        )

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_requires_approval(self, client, headers, make_user):
        user = make_user()

        response = client.patch(
            f"/api/admin/users/{user.id}/requires-approval",
            json={"requiresApproval": True},
            headers=headers,
        )

        assert response.json()["requiresApproval"] is True

    def test_deactivate_user(self, client, headers, make_user):
        user = make_user()

        response = client.patch(
            f"/api/admin/users/{user.id}/active", json={"isActive": False}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["isActive"] is False

    def test_cannot_deactivate_self(self, client, admin, headers):
        response = client.patch(
            f"/api/admin/users/{admin.id}/active", json={"isActive": False}, headers=headers
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Cannot deactivate your own account"}

    def test_deactivated_admin_loses_access(self, client, repository, make_user, auth_headers):
        other_admin = make_user(role="ADMIN")
        repository.update_user(other_admin.id, is_active=False)

        response = client.get("/api/admin/users", headers=auth_headers(other_admin))

        assert response.status_code == 403


class TestBulkUserEndpoints:
    """Tests for bulk user endpoints."""

    def test_bulk_role(self, client, headers, make_user):
        users = [make_user(role="LISTENER") for _ in range(2)]
        missing = str(uuid.uuid4())

        response = client.post(
            "/api/admin/users/bulk-update-role",
            json={"ids": [u.id for u in users] + [missing], "role": "CREATOR"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Updated 2 user(s)"
        assert data["successIds"] == [u.id for u in users]
        assert data["failed"] == [{"id": missing, "reason": "User not found"}]

    def test_bulk_active(self, client, admin, headers, make_user):
        user = make_user()

        data = client.post(
            "/api/admin/users/bulk-update-active",
            json={"ids": [user.id, admin.id], "isActive": False},
            headers=headers,
        ).json()

        assert data["successIds"] == [user.id]
        assert data["failed"][0]["id"] == admin.id

    def test_bulk_delete(self, client, repository, headers, make_user):
        user = make_user()

        data = client.post(
            "/api/admin/users/bulk-delete", json={"ids": [user.id]}, headers=headers
        ).json()

        assert data["message"] == "Deleted 1 user(s)"
        assert repository.get_user(user.id) is None

    def test_too_many_ids(self, client, headers):
        ids = [str(uuid.uuid4()) for _ in range(51)]

        response = client.post("/api/admin/users/bulk-delete", json={"ids": ids}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid data"

    def test_fifty_ids_allowed(self, client, headers):
        ids = [str(uuid.uuid4()) for _ in range(50)]

        response = client.post("/api/admin/users/bulk-delete", json={"ids": ids}, headers=headers)

        assert response.status_code == 200
        assert len(response.json()["failed"]) == 50

    def test_empty_ids(self, client, headers):
        response = client.post("/api/admin/users/bulk-delete", json={"ids": []}, headers=headers)

        assert response.status_code == 400

    def test_non_uuid_ids(self, client, headers):
        response = client.post(
            "/api/admin/users/bulk-delete", json={"ids": ["not-a-uuid"]}, headers=headers
        )

        assert response.status_code == 400


class TestPodcastModeration:
    """Tests for admin podcast endpoints."""

    def test_list_all_states(self, client, headers, make_user, make_podcast, make_episode):
        creator = make_user(role="CREATOR")
        pending = make_podcast(creator, title="Pending", status="PENDING_APPROVAL", visibility="PRIVATE")
        make_podcast(creator, title="Live")
        make_episode(pending)

        data = client.get("/api/admin/podcasts", headers=headers).json()
        assert {p["title"] for p in data} == {"Pending", "Live"}

        filtered = client.get(
            "/api/admin/podcasts", params={"status": "PENDING_APPROVAL"}, headers=headers
        ).json()
        assert [p["id"] for p in filtered] == [pending.id]
        assert filtered[0]["episodeCount"] == 1

    def test_filter_by_owner_and_search(self, client, headers, make_user, make_podcast):
        alice = make_user()
        bob = make_user()
        make_podcast(alice, title="Alice Talks")
        make_podcast(bob, title="Bob Talks")

        by_owner = client.get("/api/admin/podcasts", params={"ownerId": bob.id}, headers=headers).json()
        by_search = client.get("/api/admin/podcasts", params={"search": "alice"}, headers=headers).json()

        assert [p["title"] for p in by_owner] == ["Bob Talks"]
        assert [p["title"] for p in by_search] == ["Alice Talks"]

    def test_invalid_status_filter(self, client, headers):
        response = client.get("/api/admin/podcasts", params={"status": "LIVE"}, headers=headers)

        assert response.status_code == 400

    def test_approve(self, client, admin, headers, make_user, make_podcast):
        podcast = make_podcast(make_user(), status="PENDING_APPROVAL")

        response = client.patch(
            f"/api/admin/podcasts/{podcast.id}/status", json={"status": "APPROVED"}, headers=headers
        )

        data = response.json()
        assert data["status"] == "APPROVED"
        assert data["approvedBy"] == admin.id
        assert data["approvedAt"] is not None

    def test_status_unknown_podcast(self, client, headers):
        response = client.patch(
            "/api/admin/podcasts/missing/status", json={"status": "APPROVED"}, headers=headers
        )

        assert response.status_code == 404

    def test_delete(self, client, repository, headers, make_user, make_podcast):
        podcast = make_podcast(make_user())

        response = client.delete(f"/api/admin/podcasts/{podcast.id}", headers=headers)

        assert response.status_code == 204
        assert repository.get_podcast(podcast.id) is None
        assert client.delete(f"/api/admin/podcasts/{podcast.id}", headers=headers).status_code == 404

    def test_bulk_status_and_delete(self, client, repository, headers, make_user, make_podcast):
        creator = make_user()
        podcasts = [make_podcast(creator, status="PENDING_APPROVAL") for _ in range(2)]
        ids = [p.id for p in podcasts]

        updated = client.post(
            "/api/admin/podcasts/bulk-update-status",
            json={"ids": ids, "status": "REJECTED"},
            headers=headers,
        ).json()
        assert updated["message"] == "Updated 2 podcast(s)"
        assert all(repository.get_podcast(i).status == "REJECTED" for i in ids)

        deleted = client.post(
            "/api/admin/podcasts/bulk-delete", json={"ids": ids}, headers=headers
        ).json()
        assert deleted["successIds"] == ids


class TestEpisodeModeration:
    """Tests for admin episode endpoints."""

    def test_list_with_podcast_and_owner(self, client, headers, make_user, make_podcast, make_episode):
        creator = make_user(role="CREATOR")
        podcast = make_podcast(creator)
        episode = make_episode(podcast, status="PENDING_APPROVAL")
        make_episode(podcast)

        data = client.get(
            "/api/admin/episodes", params={"status": "PENDING_APPROVAL"}, headers=headers
        ).json()

        assert [e["id"] for e in data] == [episode.id]
        assert data[0]["podcast"]["id"] == podcast.id
        assert data[0]["podcast"]["owner"]["id"] == creator.id

    def test_filter_by_podcast_and_owner(self, client, headers, make_user, make_podcast, make_episode):
        alice = make_user()
        bob = make_user()
        alice_show = make_podcast(alice)
        make_episode(alice_show)
        make_episode(make_podcast(bob))

        by_podcast = client.get(
            "/api/admin/episodes", params={"podcastId": alice_show.id}, headers=headers
        ).json()
        by_owner = client.get("/api/admin/episodes", params={"ownerId": bob.id}, headers=headers).json()

        assert len(by_podcast) == 1
        assert by_podcast[0]["podcastId"] == alice_show.id
        assert len(by_owner) == 1
        assert by_owner[0]["podcast"]["owner"]["id"] == bob.id

    def test_reject(self, client, headers, make_user, make_podcast, make_episode):
        episode = make_episode(make_podcast(make_user()), status="PENDING_APPROVAL")

        response = client.patch(
            f"/api/admin/episodes/{episode.id}/status", json={"status": "REJECTED"}, headers=headers
        )

        assert response.json()["status"] == "REJECTED"
        assert response.json()["approvedBy"] is None

    def test_delete(self, client, headers, make_user, make_podcast, make_episode):
        episode = make_episode(make_podcast(make_user()))

        assert client.delete(f"/api/admin/episodes/{episode.id}", headers=headers).status_code == 204
        assert client.delete(f"/api/admin/episodes/{episode.id}", headers=headers).status_code == 404

    def test_bulk_endpoints(self, client, headers, make_user, make_podcast, make_episode):
        podcast = make_podcast(make_user())
        episode = make_episode(podcast, status="PENDING_APPROVAL")
        missing = str(uuid.uuid4())

        updated = client.post(
            "/api/admin/episodes/bulk-update-status",
            json={"ids": [episode.id, missing], "status": "APPROVED"},
            headers=headers,
        ).json()
        assert updated["successIds"] == [episode.id]
        assert updated["failed"] == [{"id": missing, "reason": "Episode not found"}]

        deleted = client.post(
            "/api/admin/episodes/bulk-delete", json={"ids": [episode.id]}, headers=headers
        ).json()
        assert deleted["message"] == "Deleted 1 episode(s)"

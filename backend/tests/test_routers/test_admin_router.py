"""Integration tests for /api/admin password record endpoints."""

from authentication.auth import create_access_token


class TestAdminAuth:
    def test_requires_token(self, client, single_account):
        response = client.get(f"/api/admin/password-status/{single_account.id}")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_rejects_garbage_token(self, client, single_account):
        response = client.get(
            f"/api/admin/password-status/{single_account.id}",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    def test_rejects_token_without_subject(self, client, single_account):
        token = create_access_token({"role": "admin"})
        response = client.get(
            f"/api/admin/password-status/{single_account.id}",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401

    def test_non_admin_forbidden(self, client, single_account, user_headers):
        response = client.get(
            f"/api/admin/password-status/{single_account.id}", headers=user_headers
        )
        assert response.status_code == 403


class TestPasswordStatus:
    def test_status_before_login(self, client, single_account, admin_headers):
        response = client.get(
            f"/api/admin/password-status/{single_account.id}", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json() == {
            "account_id": single_account.id,
            "has_custom_password": False,
            "liberal_login_count": 0,
            "can_use_liberal_login": True,
        }

    def test_status_after_first_login(self, client, single_account, admin_headers):
        client.post(
            "/api/auth/login",
            json={"identifier": single_account.id, "password": "mumbai"},
        )

        data = client.get(
            f"/api/admin/password-status/{single_account.id}", headers=admin_headers
        ).json()

        assert data["has_custom_password"] is True
        assert data["liberal_login_count"] == 1
        assert data["can_use_liberal_login"] is False

    def test_unknown_account(self, client, admin_headers):
        response = client.get(
            "/api/admin/password-status/+910000000000", headers=admin_headers
        )
        assert response.status_code == 404


class TestResetPasswordRecord:
    def test_reset_allows_bootstrap_again(self, client, single_account, admin_headers):
        client.post(
            "/api/auth/login",
            json={"identifier": single_account.id, "password": "mumbai"},
        )

        response = client.delete(
            f"/api/admin/password-records/{single_account.id}", headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Password record reset"

        login = client.post(
            "/api/auth/login",
            json={"identifier": single_account.id, "password": "goa"},
        )
        assert login.status_code == 200

    def test_reset_without_record(self, client, single_account, admin_headers):
        response = client.delete(
            f"/api/admin/password-records/{single_account.id}", headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["message"] == "No password record; account cleared"

    def test_non_admin_forbidden(self, client, single_account, user_headers):
        response = client.delete(
            f"/api/admin/password-records/{single_account.id}", headers=user_headers
        )
        assert response.status_code == 403


class TestListPasswordRecords:
    def test_lists_status_without_secrets(self, client, single_account, admin_headers):
        client.post(
            "/api/auth/login",
            json={"identifier": single_account.id, "password": "mumbai"},
        )

        response = client.get("/api/admin/password-records", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["has_more"] is False
        assert data["items"] == [
            {
                "account_id": single_account.id,
                "has_custom_password": True,
                "liberal_login_count": 1,
                "can_use_liberal_login": False,
            }
        ]
        assert "mumbai" not in response.text

    def test_paginates_by_account_id(self, client, make_account, admin_headers):
        for account_id in ("acct-3", "acct-1", "acct-2"):
            make_account(id=account_id, email=f"{account_id}@example.com")
            client.get(f"/api/admin/password-status/{account_id}", headers=admin_headers)

        first = client.get(
            "/api/admin/password-records?limit=2", headers=admin_headers
        ).json()
        second = client.get(
            "/api/admin/password-records?skip=2&limit=2", headers=admin_headers
        ).json()

        assert [r["account_id"] for r in first["items"]] == ["acct-1", "acct-2"]
        assert first["total"] == 3
        assert first["has_more"] is True
        assert [r["account_id"] for r in second["items"]] == ["acct-3"]
        assert second["has_more"] is False

    def test_empty(self, client, admin_headers):
        data = client.get("/api/admin/password-records", headers=admin_headers).json()
        assert data["items"] == []
        assert data["total"] == 0

    def test_requires_token(self, client):
        assert client.get("/api/admin/password-records").status_code == 401

    def test_non_admin_forbidden(self, client, user_headers):
        response = client.get("/api/admin/password-records", headers=user_headers)
        assert response.status_code == 403

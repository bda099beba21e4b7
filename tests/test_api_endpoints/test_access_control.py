"""
Access Control Tests
--------------------
Session gate behaviour on the assembled application: page redirects, API
status codes and silent refresh from the refreshToken cookie.
"""

from ngo_portal.core.config_manager import settings


class TestDashboardPages:
    def test_anonymous_page_redirects_to_login(self, client):
        response = client.get("/dashboard/admin", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/auth/login"

    def test_wrong_role_page_redirects_to_login(self, volunteer_client):
        response = volunteer_client.get("/dashboard/admin", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/auth/login"

    def test_dashboard_root_redirects_to_role_home(self, volunteer_client):
        response = volunteer_client.get("/dashboard", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/dashboard/volunteer"

    def test_allowed_page_gets_identity(self, volunteer_client):
        response = volunteer_client.get("/dashboard/volunteer")

        assert response.status_code == 200
        assert response.json()["page"] == "volunteer"
        assert response.json()["user"]["email"] == "volunteer@example.org"
        assert response.json()["user"]["role"] == "VOLUNTEER"

    def test_admin_may_view_other_dashboards(self, admin_client):
        assert admin_client.get("/dashboard/sponsor").status_code == 200
        assert admin_client.get("/dashboard/volunteer").status_code == 200

    def test_login_page_points_authenticated_user_home(self, admin_client):
        response = admin_client.get("/auth/login")

        assert response.json()["redirectUrl"] == "/dashboard/admin"


class TestApiAccess:
    def test_anonymous_api_call_is_401(self, client):
        response = client.get("/api/admin/users")

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_wrong_role_api_call_is_403(self, volunteer_client):
        response = volunteer_client.get("/api/admin/users")

        assert response.status_code == 403
        assert response.json() == {"error": "Insufficient permissions"}

    def test_public_routes_need_no_session(self, client):
        assert client.get("/api/campaigns").status_code == 200
        assert client.get("/").json()["status"] == "running"


class TestSilentRefresh:
    def test_expired_access_token_is_replaced_from_refresh_cookie(self, client, login):
        login(client, settings.admin_email, settings.admin_password)
        refresh_token = client.cookies.get("refreshToken")
        client.cookies.clear()
        client.cookies.set("refreshToken", refresh_token)

        response = client.get("/api/admin/users")

        assert response.status_code == 200
        assert response.cookies.get("accessToken")
        new_refresh = response.cookies.get("refreshToken")
        assert new_refresh and new_refresh != refresh_token

    def test_invalid_refresh_cookie_on_page_redirects(self, client):
        client.cookies.set("refreshToken", "not-a-real-token")

        response = client.get("/dashboard/admin", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/auth/login"

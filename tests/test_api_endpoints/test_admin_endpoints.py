"""
Back-Office Endpoint Tests
--------------------------
Admin CRUD over users, campaigns, blog posts, gallery, contacts, settings
and notifications, and the audit trail those mutations leave.
"""

from uuid import uuid4

import pytest


def _create_campaign(client, **overrides):
    body = {"title": "Clean water", "description": "Wells for two villages", "goal": 5000}
    body.update(overrides)
    response = client.post("/api/admin/campaigns", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def _create_image(client, title, sort_order=0):
    response = client.post(
        "/api/admin/gallery",
        json={"title": title, "url": f"https://cdn.example.org/{title}.jpg", "sortOrder": sort_order},
    )
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# USERS
# ============================================================================


class TestAdminUsers:
    def test_create_list_update_delete(self, admin_client):
        created = admin_client.post(
            "/api/admin/users",
            json={
                "firstName": "Ana",
                "lastName": "Lopez",
                "email": "ana@example.org",
                "password": "a-long-password",
                "role": "SPONSOR",
            },
        )
        assert created.status_code == 201
        user = created.json()
        assert user["verified"] is True

        listing = admin_client.get("/api/admin/users", params={"role": "SPONSOR"}).json()
        assert [u["email"] for u in listing["items"]] == ["ana@example.org"]
        assert listing["pagination"]["total"] == 1

        updated = admin_client.put(f"/api/admin/users/{user['id']}", json={"lastName": "Diaz"})
        assert updated.json()["lastName"] == "Diaz"

        assert admin_client.delete(f"/api/admin/users/{user['id']}").status_code == 200
        assert admin_client.get(f"/api/admin/users/{user['id']}").status_code == 404

    def test_second_admin_rejected(self, admin_client):
        response = admin_client.post(
            "/api/admin/users",
            json={
                "firstName": "Other",
                "lastName": "Admin",
                "email": "other-admin@example.org",
                "password": "a-long-password",
                "role": "ADMIN",
            },
        )

        assert response.status_code == 400
        assert response.json() == {"error": "An admin user already exists"}
        admins = admin_client.get("/api/admin/users", params={"role": "ADMIN"}).json()
        assert admins["pagination"]["total"] == 1

    def test_admin_cannot_delete_self(self, admin_client):
        admin_id = admin_client.get("/api/auth/me").json()["userId"]

        response = admin_client.delete(f"/api/admin/users/{admin_id}")

        assert response.status_code == 400

    def test_admin_cannot_demote_self(self, admin_client):
        admin_id = admin_client.get("/api/auth/me").json()["userId"]

        response = admin_client.put(f"/api/admin/users/{admin_id}", json={"role": "VOLUNTEER"})

        assert response.status_code == 400
        assert response.json() == {"error": "The admin user cannot be demoted"}
        admin = admin_client.get(f"/api/admin/users/{admin_id}").json()
        assert admin["role"] == "ADMIN"

    def test_empty_update_rejected(self, admin_client):
        response = admin_client.put(f"/api/admin/users/{uuid4()}", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "No fields to update"}

    def test_password_change_is_audited_without_password(self, admin_client, register):
        user_id = register(admin_client, "jamie@example.org").json()["user"]["id"]

        admin_client.put(f"/api/admin/users/{user_id}", json={"password": "brand-new-secret"})

        entries = admin_client.get(
            "/api/admin/audit-logs", params={"entityType": "USER", "entityId": user_id}
        ).json()["items"]
        assert entries[0]["changedData"] == {"passwordChanged": True}


# ============================================================================
# CAMPAIGNS AND AUDIT TRAIL
# ============================================================================


class TestAdminCampaigns:
    def test_crud_leaves_audit_trail(self, admin_client):
        admin_id = admin_client.get("/api/auth/me").json()["userId"]
        campaign = _create_campaign(admin_client)
        assert campaign["status"] == "DRAFT"
        assert campaign["createdById"] == admin_id

        updated = admin_client.put(
            f"/api/admin/campaigns/{campaign['id']}", json={"status": "ACTIVE", "raised": 750}
        )
        assert updated.status_code == 200
        assert updated.json()["status"] == "ACTIVE"

        deleted = admin_client.delete(f"/api/admin/campaigns/{campaign['id']}")
        assert deleted.json() == {"message": "Campaign deleted successfully"}

        entries = admin_client.get(
            "/api/admin/audit-logs", params={"entityId": campaign["id"]}
        ).json()["items"]
        assert sorted(e["action"] for e in entries) == ["CREATE", "DELETE", "UPDATE"]
        assert all(e["performedById"] == admin_id for e in entries)
        assert all(e["entityType"] == "CAMPAIGN" for e in entries)

    def test_status_filter(self, admin_client):
        _create_campaign(admin_client, title="Draft one")
        _create_campaign(admin_client, title="Live one", status="ACTIVE")

        listing = admin_client.get("/api/admin/campaigns", params={"status": "ACTIVE"}).json()

        assert [c["title"] for c in listing["items"]] == ["Live one"]

    def test_unknown_status_filter_is_400(self, admin_client):
        response = admin_client.get("/api/admin/campaigns", params={"status": "PAUSED"})

        assert response.status_code == 400

    def test_missing_campaign_is_404(self, admin_client):
        response = admin_client.get(f"/api/admin/campaigns/{uuid4()}")

        assert response.status_code == 404

    def test_invalid_body_is_validation_error(self, admin_client):
        response = admin_client.post("/api/admin/campaigns", json={"title": "", "goal": -1})

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    @pytest.mark.parametrize("field", ["title", "status", "description"])
    def test_null_for_required_field_is_400(self, admin_client, field):
        campaign = _create_campaign(admin_client)

        response = admin_client.put(f"/api/admin/campaigns/{campaign['id']}", json={field: None})

        assert response.status_code == 400
        assert response.json() == {"error": f"{field} cannot be null"}
        stored = admin_client.get(f"/api/admin/campaigns/{campaign['id']}").json()
        assert stored[field] == campaign[field]

    def test_null_for_optional_field_clears_it(self, admin_client):
        campaign = _create_campaign(admin_client, location="Kisumu")

        response = admin_client.put(
            f"/api/admin/campaigns/{campaign['id']}", json={"location": None}
        )

        assert response.status_code == 200
        assert response.json()["location"] is None


# ============================================================================
# BLOG POSTS
# ============================================================================


class TestAdminBlog:
    def test_create_publish_and_duplicate_slug(self, admin_client):
        created = admin_client.post(
            "/api/admin/blogs", json={"title": "Harvest Festival", "content": "It was great."}
        )
        assert created.status_code == 201
        post = created.json()
        assert post["slug"] == "harvest-festival"
        assert post["publishedAt"] is None

        published = admin_client.put(
            f"/api/admin/blogs/{post['id']}", json={"status": "PUBLISHED"}
        ).json()
        assert published["publishedAt"] is not None

        duplicate = admin_client.post(
            "/api/admin/blogs", json={"title": "Harvest festival", "content": "Again"}
        )
        assert duplicate.status_code == 400
        assert duplicate.json() == {"error": "A post with this slug already exists"}


# ============================================================================
# GALLERY
# ============================================================================


class TestAdminGallery:
    def test_create_records_creator(self, admin_client):
        admin_id = admin_client.get("/api/auth/me").json()["userId"]

        image = _create_image(admin_client, "school")

        assert image["createdById"] == admin_id

    def test_null_title_update_is_400(self, admin_client):
        image = _create_image(admin_client, "school")

        response = admin_client.put(f"/api/admin/gallery/{image['id']}", json={"title": None})

        assert response.status_code == 400
        assert response.json() == {"error": "title cannot be null"}

    def test_batch_with_missing_id_reports_partial_result(self, admin_client):
        images = [_create_image(admin_client, f"photo-{i}") for i in range(4)]
        target_ids = [image["id"] for image in images] + [str(uuid4())]

        response = admin_client.post(
            "/api/admin/gallery/batch",
            json={"type": "status_change", "targetIds": target_ids, "value": "HIDDEN"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["summary"] == {"total": 5, "success": 4, "failed": 1}
        assert data["message"] == "Batch operation completed. 4 successful, 1 failed."
        assert data["results"]["errors"][0]["id"] == target_ids[-1]
        for image in images:
            stored = admin_client.get(f"/api/admin/gallery/{image['id']}").json()
            assert stored["status"] == "HIDDEN"

    def test_unsupported_batch_type(self, admin_client):
        image = _create_image(admin_client, "photo")

        response = admin_client.post(
            "/api/admin/gallery/batch", json={"type": "rotate", "targetIds": [image["id"]]}
        )

        assert response.status_code == 400
        assert "Unsupported batch operation" in response.json()["error"]

    def test_reorder(self, admin_client):
        first = _create_image(admin_client, "first", 0)
        second = _create_image(admin_client, "second", 1)

        response = admin_client.post(
            "/api/admin/gallery/reorder",
            json={
                "order": [
                    {"id": first["id"], "sortOrder": 1},
                    {"id": second["id"], "sortOrder": 0},
                ]
            },
        )

        assert response.status_code == 200
        assert response.json()["summary"]["success"] == 2
        listing = admin_client.get("/api/admin/gallery").json()["items"]
        assert [image["title"] for image in listing] == ["second", "first"]

    def test_reorder_with_missing_id_changes_nothing(self, admin_client):
        image = _create_image(admin_client, "only", 3)
        missing = str(uuid4())

        response = admin_client.post(
            "/api/admin/gallery/reorder",
            json={"order": [{"id": image["id"], "sortOrder": 0}, {"id": missing, "sortOrder": 1}]},
        )

        assert response.status_code == 400
        assert response.json()["details"] == {"missingIds": [missing]}
        assert admin_client.get(f"/api/admin/gallery/{image['id']}").json()["sortOrder"] == 3


# ============================================================================
# CONTACTS, SETTINGS, NOTIFICATIONS
# ============================================================================


class TestAdminContacts:
    def test_triage_contact(self, admin_client):
        contact_id = admin_client.post(
            "/api/contacts",
            json={
                "name": "Ben",
                "email": "ben@example.org",
                "subject": "Press enquiry",
                "message": "Can we interview you?",
            },
        ).json()["id"]

        updated = admin_client.patch(
            f"/api/admin/contacts/{contact_id}", json={"status": "IN_PROGRESS"}
        )
        assert updated.json()["status"] == "IN_PROGRESS"

        listing = admin_client.get("/api/admin/contacts", params={"search": "press"}).json()
        assert listing["pagination"]["total"] == 1

        assert admin_client.delete(f"/api/admin/contacts/{contact_id}").status_code == 200
        assert admin_client.get(f"/api/admin/contacts/{contact_id}").status_code == 404


class TestAdminSettings:
    def test_upsert_read_update_delete(self, admin_client):
        created = admin_client.post(
            "/api/admin/settings",
            json={"key": "site_name", "value": "Hope Foundation", "category": "branding"},
        )
        assert created.status_code == 200
        assert created.json()["category"] == "branding"

        assert admin_client.get("/api/admin/settings/site_name").json()["value"] == "Hope Foundation"

        updated = admin_client.put("/api/admin/settings/site_name", json={"value": "Hope Intl"})
        assert updated.json()["value"] == "Hope Intl"

        listing = admin_client.get("/api/admin/settings", params={"category": "branding"}).json()
        assert [s["key"] for s in listing] == ["site_name"]

        assert admin_client.delete("/api/admin/settings/site_name").status_code == 200
        assert admin_client.get("/api/admin/settings/site_name").status_code == 404


class TestAdminNotifications:
    def test_create_mark_read_delete(self, admin_client):
        created = admin_client.post(
            "/api/admin/notifications",
            json={"title": "Board meeting", "description": "Friday 10:00", "type": "WARNING"},
        )
        assert created.status_code == 201
        notification = created.json()
        assert notification["read"] is False

        marked = admin_client.patch(f"/api/admin/notifications/{notification['id']}/read")
        assert marked.json()["read"] is True

        stats = admin_client.get("/api/dashboard/admin").json()
        assert stats["unreadNotifications"] == 0

        deleted = admin_client.delete(f"/api/admin/notifications/{notification['id']}")
        assert deleted.status_code == 200
        missing = admin_client.delete(f"/api/admin/notifications/{notification['id']}")
        assert missing.status_code == 404

    @pytest.mark.parametrize("notification_type", ["URGENT", ""])
    def test_unknown_type_rejected(self, admin_client, notification_type):
        response = admin_client.post(
            "/api/admin/notifications",
            json={"title": "Oops", "description": "Bad type", "type": notification_type},
        )

        assert response.status_code == 400


# ============================================================================
# EXPORT AND ANALYTICS
# ============================================================================


class TestAdminExport:
    def test_users_csv_download(self, admin_client, register):
        register(admin_client, "jamie@example.org")

        response = admin_client.get("/api/admin/export/users")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="users_')
        assert disposition.endswith('.csv"')
        lines = response.text.splitlines()
        assert lines[0] == "id,email,firstName,lastName,phone,role,verified,createdAt,updatedAt"
        assert len(lines) == 3
        assert "passwordHash" not in response.text

    def test_campaigns_json_download(self, admin_client):
        _create_campaign(admin_client)

        response = admin_client.get("/api/admin/export/campaigns", params={"format": "json"})

        assert response.status_code == 200
        rows = response.json()
        assert rows[0]["title"] == "Clean water"
        assert rows[0]["createdBy.email"] == "admin@example.org"

    def test_unknown_type_and_format(self, admin_client):
        assert admin_client.get("/api/admin/export/donations").json() == {
            "error": "Invalid export type"
        }
        response = admin_client.get("/api/admin/export/users", params={"format": "xml"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid format"}

    def test_volunteer_cannot_export(self, volunteer_client):
        assert volunteer_client.get("/api/admin/export/users").status_code == 403


class TestAdminGalleryAnalytics:
    def test_analytics_overview(self, admin_client):
        _create_image(admin_client, "well")
        image = _create_image(admin_client, "school")
        admin_client.put(f"/api/admin/gallery/{image['id']}", json={"status": "ARCHIVED"})

        response = admin_client.get("/api/admin/gallery/analytics", params={"period": "7d"})

        assert response.status_code == 200
        data = response.json()
        assert data["overview"]["totalImages"] == 2
        assert data["overview"]["archivedImages"] == 1
        assert data["overview"]["period"] == "7d"
        admin_id = admin_client.get("/api/auth/me").json()["userId"]
        assert data["mostActiveUsers"][0]["userId"] == admin_id
        assert data["mostActiveUsers"][0]["activityCount"] == 3
        assert data["mostActiveUsers"][0]["user"]["email"] == "admin@example.org"

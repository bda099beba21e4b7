"""
WebSocket Endpoint Tests
------------------------
Live notification channel on the assembled application.
"""


class TestNotificationSocket:
    def test_ping_gets_pong(self, client):
        with client.websocket_connect("/api/ws/notifications") as websocket:
            websocket.send_json({"type": "ping"})

            assert websocket.receive_json() == {"type": "pong"}

    def test_binary_frame_is_ignored(self, client):
        with client.websocket_connect("/api/ws/notifications") as websocket:
            websocket.send_bytes(b"\x00\x01binary")
            websocket.send_json({"type": "ping"})

            assert websocket.receive_json() == {"type": "pong"}

    def test_admin_notification_is_pushed(self, admin_client):
        with admin_client.websocket_connect("/api/ws/notifications") as websocket:
            # The pong confirms the connection is registered
            websocket.send_json({"type": "ping"})
            assert websocket.receive_json() == {"type": "pong"}

            response = admin_client.post(
                "/api/admin/notifications",
                json={"title": "Food drive", "description": "Saturday at the hall"},
            )
            assert response.status_code == 201

            message = websocket.receive_json()
            assert message["type"] == "notification"
            assert message["data"]["id"] == response.json()["id"]
            assert message["data"]["title"] == "Food drive"
            assert message["data"]["read"] is False
            assert "createdAt" in message["data"]

    def test_connected_clients_counted(self, admin_client):
        with admin_client.websocket_connect("/api/ws/notifications") as websocket:
            websocket.send_json({"type": "ping"})
            websocket.receive_json()

            stats = admin_client.get("/api/dashboard/admin").json()

        assert stats["connectedClients"] == 1

    def test_gallery_batch_is_pushed(self, admin_client):
        image = admin_client.post(
            "/api/admin/gallery",
            json={"title": "Well", "url": "https://cdn.example.org/w.jpg"},
        ).json()

        with admin_client.websocket_connect("/api/ws/notifications") as websocket:
            websocket.send_json({"type": "ping"})
            websocket.receive_json()

            admin_client.post(
                "/api/admin/gallery/batch",
                json={"type": "category_change", "targetIds": [image["id"]], "value": "water"},
            )

            message = websocket.receive_json()

        assert message == {
            "type": "gallery_update",
            "data": {
                "operation": "category_change",
                "summary": {"total": 1, "success": 1, "failed": 0},
            },
        }

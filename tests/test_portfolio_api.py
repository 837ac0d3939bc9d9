import unittest

from tests.base import ApiTestCase
from tests.fakes import FakeStorage


class PortfolioTestCase(ApiTestCase):
    def create(self, title, **fields):
        payload = {"title": title, "image_url": "https://cdn.example.com/x.jpg"}
        payload.update(fields)
        response = self.client.post("/api/v1/portfolio", json=payload, headers=self.as_admin())
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()


class PortfolioOrderingTests(PortfolioTestCase):
    def setUp(self):
        super().setUp()
        self.a = self.create("A", order_index=2)
        self.b = self.create("B", order_index=1)
        self.c = self.create("C", order_index=1)
        self.hidden = self.create("H", order_index=0, visible=False)

    def titles(self, **kwargs):
        response = self.client.get("/api/v1/portfolio", **kwargs)
        self.assertEqual(response.status_code, 200)
        return [item["title"] for item in response.json()]

    def test_public_listing_order(self):
        # order_index ascending, ties newest first
        self.assertEqual(self.titles(), ["C", "B", "A"])

    def test_include_hidden_ignored_for_non_admins(self):
        self.assertEqual(self.titles(params={"include_hidden": "true"}), ["C", "B", "A"])
        self.assertEqual(self.titles(params={"include_hidden": "true"}, headers=self.as_viewer()), ["C", "B", "A"])

    def test_admin_sees_hidden_on_request(self):
        self.assertEqual(self.titles(headers=self.as_admin()), ["C", "B", "A"])
        self.assertEqual(self.titles(params={"include_hidden": "true"}, headers=self.as_admin()),
                         ["H", "C", "B", "A"])


class PortfolioTimestampTests(PortfolioTestCase):
    def test_trimmed_fractional_timestamps_sort(self):
        base = {"image_url": "https://cdn.example.com/x.jpg", "order_index": 1, "visible": True}
        self.store.tables["portfolio"] = [
            dict(base, id="old", title="Old", created_at="2024-05-01T10:11:12.12345+00:00"),
            dict(base, id="new", title="New", created_at="2024-05-01T10:11:12.5+00:00"),
            dict(base, id="mid", title="Mid", created_at="2024-05-01T10:11:12.1234+00:00"),
        ]
        response = self.client.get("/api/v1/portfolio")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["id"] for item in response.json()], ["new", "old", "mid"])

    def test_stats_with_trimmed_fractional_timestamps(self):
        self.store.tables["portfolio"] = [
            {"id": "p1", "title": "A", "image_url": "https://cdn.example.com/a.jpg",
             "visible": True, "created_at": "2024-05-01T10:11:12.12345+00:00"},
        ]
        stats = self.client.get("/api/v1/portfolio/stats", headers=self.as_admin()).json()
        self.assertEqual(stats["total"], 1)
        self.assertEqual(stats["recent_uploads"], 0)


class PortfolioMutationTests(PortfolioTestCase):
    def test_create_is_audited(self):
        item = self.create("Dunes", description="Namib")
        self.assertTrue(item["visible"])
        self.assertEqual(item["order_index"], 0)
        entries = self.audit_entries("portfolio_created")
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0]["row_id"], item["id"])

    def test_invalid_image_url_is_rejected(self):
        response = self.client.post(
            "/api/v1/portfolio",
            json={"title": "Bad", "image_url": "not a url"},
            headers=self.as_admin(),
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.store.rows("portfolio"), [])

    def test_viewer_cannot_create(self):
        response = self.client.post(
            "/api/v1/portfolio",
            json={"title": "X", "image_url": "https://cdn.example.com/x.jpg"},
            headers=self.as_viewer(),
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.store.mutations, [])

    def test_partial_update(self):
        item = self.create("Dunes")
        response = self.client.patch(
            f"/api/v1/portfolio/{item['id']}",
            json={"visible": False, "order_index": 5},
            headers=self.as_admin(),
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertFalse(body["visible"])
        self.assertEqual(body["order_index"], 5)
        self.assertEqual(body["title"], "Dunes")
        self.assertEqual(self.audit_entries("portfolio_updated")[0]["payload"], {"visible": False, "order_index": 5})

    def test_update_rejects_null_required_fields(self):
        item = self.create("Dunes")
        response = self.client.patch(
            f"/api/v1/portfolio/{item['id']}", json={"image_url": None}, headers=self.as_admin())
        self.assertEqual(response.status_code, 400)

    def test_update_missing_item(self):
        response = self.client.patch("/api/v1/portfolio/nope", json={"title": "X"}, headers=self.as_admin())
        self.assertEqual(response.status_code, 404)


class PortfolioDeleteTests(PortfolioTestCase):
    def test_delete_removes_blob_in_portfolio_bucket(self):
        uploaded = self.client.post(
            "/api/v1/portfolio/upload",
            files={"file": ("dunes.png", b"png-bytes", "image/png")},
            headers=self.as_admin(),
        )
        self.assertEqual(uploaded.status_code, 201, uploaded.text)
        blob = uploaded.json()
        self.assertEqual(blob["storage_bucket"], "portfolio-images")
        self.assertIn(blob["file_path"], self.store.storage.buckets["portfolio-images"])

        item = self.create("Dunes", image_url=blob["public_url"])
        response = self.client.delete(f"/api/v1/portfolio/{item['id']}", headers=self.as_admin())
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["blob_removed"])
        self.assertEqual(self.store.storage.buckets["portfolio-images"], {})
        self.assertEqual(self.store.rows("portfolio"), [])

    def test_delete_leaves_external_images_alone(self):
        self.store.storage.buckets["media-images"] = {"u/1.jpg": b"keep"}
        item = self.create("Linked", image_url=f"{FakeStorage.BASE_URL}/media-images/u/1.jpg")
        response = self.client.delete(f"/api/v1/portfolio/{item['id']}", headers=self.as_admin())
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["blob_removed"])
        self.assertEqual(self.store.storage.buckets["media-images"], {"u/1.jpg": b"keep"})
        self.assertNotIn(("storage:media-images", "remove"), self.store.mutations)
        self.assertEqual(self.store.rows("portfolio"), [])

    def test_upload_rejects_non_images(self):
        response = self.client.post(
            "/api/v1/portfolio/upload",
            files={"file": ("clip.mp4", b"mp4", "video/mp4")},
            headers=self.as_admin(),
        )
        self.assertEqual(response.status_code, 400)


class PortfolioStatsTests(PortfolioTestCase):
    def test_stats_require_admin(self):
        self.assertEqual(self.client.get("/api/v1/portfolio/stats").status_code, 401)

    def test_stats_counts_visibility(self):
        self.create("A")
        self.create("B", visible=False)
        stats = self.client.get("/api/v1/portfolio/stats", headers=self.as_admin()).json()
        self.assertEqual(stats["total"], 2)
        self.assertEqual(stats["visible"], 1)
        self.assertEqual(stats["hidden"], 1)
        self.assertEqual(stats["recent_uploads"], 0)


if __name__ == "__main__":
    unittest.main()

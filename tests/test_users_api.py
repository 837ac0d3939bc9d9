import unittest

from tests.base import ApiTestCase
from tests.fakes import bearer


class UserAdminGateTests(ApiTestCase):
    def test_viewer_cannot_change_roles(self):
        response = self.client.put(
            f"/api/v1/users/{self.viewer['id']}/role",
            json={"role": "admin"},
            headers=self.as_viewer(),
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["detail"], "Unauthorized: Admin access required")
        self.assertEqual(self.store.mutations, [])
        self.assertEqual(self.viewer["role"], "viewer")

    def test_anonymous_list_is_401(self):
        response = self.client.get("/api/v1/users")
        self.assertEqual(response.status_code, 401)

    def test_bad_token_never_reaches_admin(self):
        response = self.client.get("/api/v1/users", headers={"Authorization": "Bearer forged"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.store.mutations, [])


class UserListTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.store.add_profile(role="viewer", status="suspended", name="Sam Suspended", email="sam@example.com")
        self.store.add_profile(role="viewer", name="Paula Phone", email="paula@example.com")["phone"] = "555-0100"

    def test_lists_all_with_total(self):
        body = self.client.get("/api/v1/users", headers=self.as_admin()).json()
        self.assertEqual(body["total"], 4)
        self.assertEqual(len(body["users"]), 4)
        # newest first by default
        self.assertEqual(body["users"][0]["email"], "paula@example.com")

    def test_search_matches_name_email_or_phone(self):
        by_name = self.client.get("/api/v1/users", params={"search": "ada"}, headers=self.as_admin()).json()
        self.assertEqual([u["email"] for u in by_name["users"]], ["ada@example.com"])
        by_phone = self.client.get("/api/v1/users", params={"search": "0100"}, headers=self.as_admin()).json()
        self.assertEqual([u["email"] for u in by_phone["users"]], ["paula@example.com"])

    def test_role_and_status_filters(self):
        admins = self.client.get("/api/v1/users", params={"role": "admin"}, headers=self.as_admin()).json()
        self.assertEqual(admins["total"], 1)
        suspended = self.client.get("/api/v1/users", params={"status": "suspended"}, headers=self.as_admin()).json()
        self.assertEqual([u["email"] for u in suspended["users"]], ["sam@example.com"])

    def test_pagination_keeps_unpaginated_total(self):
        page = self.client.get(
            "/api/v1/users",
            params={"sort_by": "name", "sort_order": "asc", "limit": 2, "offset": 1},
            headers=self.as_admin(),
        ).json()
        self.assertEqual(page["total"], 4)
        self.assertEqual([u["name"] for u in page["users"]], ["Paula Phone", "Sam Suspended"])

    def test_limit_out_of_range_is_rejected(self):
        response = self.client.get("/api/v1/users", params={"limit": 500}, headers=self.as_admin())
        self.assertEqual(response.status_code, 422)

    def test_get_single_user(self):
        response = self.client.get(f"/api/v1/users/{self.viewer['id']}", headers=self.as_admin())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["email"], "victor@example.com")
        missing = self.client.get("/api/v1/users/nobody", headers=self.as_admin())
        self.assertEqual(missing.status_code, 404)


class UserMutationTests(ApiTestCase):
    def test_role_change_is_audited_once(self):
        response = self.client.put(
            f"/api/v1/users/{self.viewer['id']}/role",
            json={"role": "admin"},
            headers=self.as_admin(),
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["user"]["role"], "admin")

        entries = self.audit_entries("role_change")
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0]["performed_by"], self.admin["id"])
        self.assertEqual(entries[0]["row_id"], self.viewer["id"])
        self.assertEqual(entries[0]["payload"], {"new_role": "admin"})

    def test_invalid_role_value_is_rejected(self):
        response = self.client.put(
            f"/api/v1/users/{self.viewer['id']}/role",
            json={"role": "owner"},
            headers=self.as_admin(),
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.store.mutations, [])

    def test_status_change(self):
        response = self.client.put(
            f"/api/v1/users/{self.viewer['id']}/status",
            json={"status": "suspended"},
            headers=self.as_admin(),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.viewer["status"], "suspended")
        self.assertEqual(self.audit_entries("status_change")[0]["payload"], {"new_status": "suspended"})

    def test_role_change_on_missing_user(self):
        response = self.client.put("/api/v1/users/ghost/role", json={"role": "admin"}, headers=self.as_admin())
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.audit_entries(), [])

    def test_audit_failure_does_not_block_mutation(self):
        self.store.fail("audit_logs", "insert")
        response = self.client.put(
            f"/api/v1/users/{self.viewer['id']}/role",
            json={"role": "admin"},
            headers=self.as_admin(),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.viewer["role"], "admin")
        self.assertEqual(self.audit_entries(), [])

    def test_admin_cannot_delete_self(self):
        response = self.client.delete(f"/api/v1/users/{self.admin['id']}", headers=self.as_admin())
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Cannot delete your own account")
        self.assertIn(self.admin["id"], [p["id"] for p in self.store.rows("profiles")])

    def test_delete_user(self):
        response = self.client.delete(f"/api/v1/users/{self.viewer['id']}", headers=self.as_admin())
        self.assertEqual(response.status_code, 204)
        self.assertNotIn(self.viewer["id"], [p["id"] for p in self.store.rows("profiles")])
        self.assertEqual(len(self.audit_entries("user_deleted")), 1)

    def test_bulk_delete_skips_caller(self):
        a = self.store.add_profile()
        b = self.store.add_profile()
        response = self.client.post(
            "/api/v1/users/bulk-delete",
            json={"user_ids": [self.admin["id"], a["id"], b["id"]]},
            headers=self.as_admin(),
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["deleted"], 2)
        self.assertEqual(body["deleted_ids"], [a["id"], b["id"]])

        remaining = [p["id"] for p in self.store.rows("profiles")]
        self.assertIn(self.admin["id"], remaining)
        self.assertNotIn(a["id"], remaining)

        entries = self.audit_entries("bulk_user_deleted")
        self.assertEqual(len(entries), 1)
        self.assertIsNone(entries[0]["row_id"])
        self.assertEqual(entries[0]["payload"], {"deleted_ids": [a["id"], b["id"]]})

    def test_bulk_delete_of_only_self_is_rejected(self):
        response = self.client.post(
            "/api/v1/users/bulk-delete",
            json={"user_ids": [self.admin["id"]]},
            headers=self.as_admin(),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.store.mutations, [])

    def test_bulk_delete_reports_only_rows_removed(self):
        a = self.store.add_profile()
        response = self.client.post(
            "/api/v1/users/bulk-delete",
            json={"user_ids": [a["id"], "ghost"]},
            headers=self.as_admin(),
        )
        self.assertEqual(response.json()["deleted_ids"], [a["id"]])


class UserStoreFailureTests(ApiTestCase):
    """A failed primary write surfaces as 500 and leaves no audit entry behind."""

    def test_role_update_failure(self):
        self.store.fail("profiles", "update")
        response = self.client.put(
            f"/api/v1/users/{self.viewer['id']}/role",
            json={"role": "admin"},
            headers=self.as_admin(),
        )
        self.assertEqual(response.status_code, 500)
        self.assertTrue(response.json()["detail"].startswith("Failed to update user role"))
        self.assertEqual(self.viewer["role"], "viewer")
        self.assertEqual(self.audit_entries(), [])

    def test_delete_failure(self):
        self.store.fail("profiles", "delete")
        response = self.client.delete(f"/api/v1/users/{self.viewer['id']}", headers=self.as_admin())
        self.assertEqual(response.status_code, 500)
        self.assertIn(self.viewer["id"], [p["id"] for p in self.store.rows("profiles")])
        self.assertEqual(self.audit_entries(), [])

    def test_bulk_delete_failure(self):
        a = self.store.add_profile()
        self.store.fail("profiles", "delete")
        response = self.client.post(
            "/api/v1/users/bulk-delete",
            json={"user_ids": [a["id"], self.viewer["id"]]},
            headers=self.as_admin(),
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(len(self.store.rows("profiles")), 3)
        self.assertEqual(self.audit_entries(), [])


class SelfServiceTests(ApiTestCase):
    def test_me_requires_profile(self):
        self.assertEqual(self.client.get("/api/v1/users/me").status_code, 401)
        me = self.client.get("/api/v1/users/me", headers=self.as_viewer()).json()
        self.assertEqual(me["id"], self.viewer["id"])

    def test_update_me_changes_own_fields(self):
        response = self.client.patch(
            "/api/v1/users/me",
            json={"name": "Victor V.", "phone": "555-0199"},
            headers=self.as_viewer(),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Victor V.")
        self.assertEqual(self.viewer["phone"], "555-0199")

    def test_update_me_cannot_escalate(self):
        response = self.client.patch("/api/v1/users/me", json={"role": "admin"}, headers=self.as_viewer())
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.viewer["role"], "viewer")
        self.assertEqual(self.store.mutations, [])

    def test_suspended_viewer_still_resolves(self):
        suspended = self.store.add_profile(status="suspended")
        me = self.client.get("/api/v1/users/me", headers=bearer(suspended)).json()
        self.assertEqual(me["status"], "suspended")


if __name__ == "__main__":
    unittest.main()

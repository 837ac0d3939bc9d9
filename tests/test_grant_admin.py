import unittest
from unittest import mock

from app.scripts import grant_admin
from tests.fakes import FakeSupabase


class GrantRoleTests(unittest.TestCase):
    def setUp(self):
        self.store = FakeSupabase()
        self.owner = self.store.add_profile(email="owner@example.com")

    def test_promotes_by_email_and_audits(self):
        profile = grant_admin.grant_role(self.store, "owner@example.com")
        self.assertEqual(profile.role, "admin")
        self.assertEqual(self.owner["role"], "admin")
        entry = self.store.rows("audit_logs")[0]
        self.assertIsNone(entry["performed_by"])
        self.assertEqual(entry["payload"], {"new_role": "admin", "source": "grant_admin"})

    def test_unknown_email(self):
        self.assertIsNone(grant_admin.grant_role(self.store, "nobody@example.com"))
        self.assertEqual(self.store.rows("audit_logs"), [])

    def test_main_exits_when_no_profile_matches(self):
        with mock.patch.object(grant_admin, "get_service_supabase", return_value=self.store):
            with self.assertRaises(SystemExit) as cm:
                grant_admin.main(["--email", "nobody@example.com"])
        self.assertEqual(cm.exception.code, 1)

    def test_main_demotes(self):
        self.owner["role"] = "admin"
        with mock.patch.object(grant_admin, "get_service_supabase", return_value=self.store):
            grant_admin.main(["--email", "owner@example.com", "--role", "viewer"])
        self.assertEqual(self.owner["role"], "viewer")


if __name__ == "__main__":
    unittest.main()

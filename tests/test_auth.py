import unittest

from db.models import SessionUser
from stores.auth import AuthStore, DemoAuthBackend
from utils.exceptions import InvalidCredentials


class AuthStoreTestCase(unittest.TestCase):
    def setUp(self):
        self.auth = AuthStore()

    def test_starts_logged_out(self):
        self.assertFalse(self.auth.is_authenticated)
        self.assertIsNone(self.auth.user)

    def test_login_with_demo_credentials(self):
        user = self.auth.login("admin", "admin123")
        self.assertEqual(user, SessionUser(id="1", username="admin", role="admin"))
        self.assertTrue(self.auth.is_authenticated)
        self.assertEqual(self.auth.user.role, "admin")

    def test_wrong_password_is_rejected(self):
        with self.assertRaises(InvalidCredentials):
            self.auth.login("admin", "wrongpass")
        self.assertFalse(self.auth.is_authenticated)

    def test_failed_login_drops_existing_session(self):
        self.auth.login("admin", "admin123")
        with self.assertRaises(InvalidCredentials):
            self.auth.login("root", "admin123")
        self.assertIsNone(self.auth.user)

    def test_logout(self):
        self.auth.login("admin", "admin123")
        self.auth.logout()
        self.assertFalse(self.auth.is_authenticated)
        # logging out twice is harmless
        self.auth.logout()
        self.assertIsNone(self.auth.user)

    def test_custom_backend(self):
        class StaticBackend:
            def authenticate(self, username, password):
                if password != "s3cret":
                    raise InvalidCredentials()
                return SessionUser("42", username, "admin")

        auth = AuthStore(StaticBackend())
        self.assertEqual(auth.login("ops", "s3cret").id, "42")
        with self.assertRaises(InvalidCredentials):
            auth.login("ops", "admin123")

    def test_demo_backend_credentials_are_configurable(self):
        backend = DemoAuthBackend("owner", "pw")
        self.assertEqual(backend.authenticate("owner", "pw").username, "owner")
        with self.assertRaises(InvalidCredentials):
            backend.authenticate("admin", "admin123")


if __name__ == "__main__":
    unittest.main()

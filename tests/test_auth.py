import unittest
from datetime import timedelta

from autocare import schemas
from autocare.auth import (
    DatabaseUserStore,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from autocare.exceptions import UnauthorizedError
from autocare.models import User, UserRole
from autocare.services import auth_service
from tests.helpers import DatabaseTestCase


class TestPasswords(unittest.TestCase):

    def test_hash_and_verify(self):
        hashed = hash_password("s3cret")
        self.assertNotEqual(hashed, "s3cret")
        self.assertTrue(verify_password("s3cret", hashed))
        self.assertFalse(verify_password("wrong", hashed))

    def test_malformed_hash_does_not_verify(self):
        self.assertFalse(verify_password("s3cret", "not-a-bcrypt-hash"))


class TestTokens(unittest.TestCase):

    def test_round_trip(self):
        token = create_access_token("admin", UserRole.ADMIN)
        claims = decode_access_token(token)
        self.assertEqual(claims["sub"], "admin")
        self.assertEqual(claims["role"], "ADMIN")
        self.assertIn("exp", claims)

    def test_expired_token_is_rejected(self):
        token = create_access_token("admin", UserRole.ADMIN, expires_delta=timedelta(seconds=-30))
        with self.assertRaises(UnauthorizedError):
            decode_access_token(token)

    def test_tampered_token_is_rejected(self):
        token = create_access_token("user", UserRole.USER)
        header, payload, signature = token.split(".")
        with self.assertRaises(UnauthorizedError):
            decode_access_token(f"{header}.{payload}.{signature[::-1]}")

    def test_garbage_is_rejected(self):
        with self.assertRaises(UnauthorizedError):
            decode_access_token("not-a-token")


class TestUserStore(DatabaseTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        await auth_service.seed_demo_users(self.db)
        self.store = DatabaseUserStore(self.db)

    async def test_seeding_is_idempotent(self):
        self.assertEqual(await auth_service.seed_demo_users(self.db), 0)

    async def test_validate_credentials(self):
        self.assertTrue(await self.store.validate_credentials("admin", "admin123"))
        self.assertFalse(await self.store.validate_credentials("admin", "user123"))
        self.assertFalse(await self.store.validate_credentials("nobody", "admin123"))

    async def test_get_role(self):
        self.assertEqual(await self.store.get_role("admin"), UserRole.ADMIN)
        self.assertEqual(await self.store.get_role("user"), UserRole.USER)
        self.assertIsNone(await self.store.get_role("nobody"))

    async def test_inactive_user_is_invisible(self):
        self.db.add(User(username="ghost", hashed_password=hash_password("boo"), role=UserRole.USER, is_active=False))
        await self.db.commit()

        self.assertIsNone(await self.store.find_by_username("ghost"))
        self.assertFalse(await self.store.validate_credentials("ghost", "boo"))

    async def test_authenticate_issues_token(self):
        token = await auth_service.authenticate(
            self.store, schemas.LoginRequest(username="user", password="user123")
        )

        self.assertEqual(token.token_type, "bearer")
        self.assertEqual(token.role, UserRole.USER)
        self.assertEqual(decode_access_token(token.access_token)["sub"], "user")
        self.assertGreater(token.expires_in, 0)

    async def test_authenticate_with_bad_password(self):
        with self.assertRaises(UnauthorizedError) as ctx:
            await auth_service.authenticate(self.store, schemas.LoginRequest(username="user", password="nope"))
        self.assertEqual(ctx.exception.status_code, 401)


if __name__ == "__main__":
    unittest.main()

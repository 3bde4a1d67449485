import unittest
from datetime import timedelta

from fastapi import HTTPException
from fastapi.testclient import TestClient

from catalog_backend.app import create_app
from catalog_backend.db import ADMINS, InMemoryDbClient
from catalog_backend.dependencies import get_db_client
from catalog_backend.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class SecurityTests(unittest.TestCase):
    def test_password_hashing(self):
        hashed = hash_password("s3cret")
        self.assertNotEqual(hashed, "s3cret")
        self.assertTrue(verify_password("s3cret", hashed))
        self.assertFalse(verify_password("wrong", hashed))
        self.assertFalse(verify_password("s3cret", "not-a-hash"))

    def test_token_roundtrip(self):
        token = create_access_token("admin-1", "admin")
        self.assertEqual(decode_access_token(token), "admin-1")

    def test_expired_token_rejected(self):
        token = create_access_token("admin-1", "admin", expires_delta=timedelta(seconds=-5))
        with self.assertRaises(HTTPException) as ctx:
            decode_access_token(token)
        self.assertEqual(ctx.exception.status_code, 401)


class AdminApiTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        app = create_app()
        app.dependency_overrides[get_db_client] = lambda: self.db
        self.client = TestClient(app)

    def login(self, username="admin", password="123456"):
        return self.client.post(
            "/api/admin/login", json={"username": username, "password": password}
        )

    def test_seed_and_login(self):
        response = self.client.post("/api/admin/seed")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.client.post("/api/admin/seed").status_code, 400)

        stored = self.db.find_one(ADMINS, where={"username": "admin"})
        self.assertNotEqual(stored["password_hash"], "123456")

        response = self.login()
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["admin"], {"username": "admin", "email": "admin@example.com"})
        self.assertEqual(payload["token_type"], "bearer")
        self.assertTrue(payload["access_token"])

    def test_login_errors(self):
        self.client.post("/api/admin/seed")
        response = self.login(username="nobody")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Invalid username")
        response = self.login(password="wrong")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Invalid password")

    def test_update_requires_token(self):
        self.client.post("/api/admin/seed")
        response = self.client.post(
            "/api/admin/update", json={"currentUsername": "admin", "newUsername": "boss"}
        )
        self.assertEqual(response.status_code, 401)

        response = self.client.post(
            "/api/admin/update",
            json={"currentUsername": "admin", "newUsername": "boss"},
            headers={"Authorization": "Bearer garbage"},
        )
        self.assertEqual(response.status_code, 401)

    def test_update_credentials(self):
        self.client.post("/api/admin/seed")
        token = self.login().json()["access_token"]
        headers = {"Authorization": f"Bearer {token}"}

        response = self.client.post(
            "/api/admin/update",
            json={"currentUsername": "admin", "newUsername": "boss", "newPassword": "n3w-pass"},
            headers=headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.login().status_code, 400)
        self.assertEqual(self.login("boss", "n3w-pass").status_code, 200)

        response = self.client.post(
            "/api/admin/update", json={"currentUsername": "ghost"}, headers=headers
        )
        self.assertEqual(response.status_code, 404)

    def test_username_taken(self):
        self.client.post("/api/admin/seed")
        self.db.insert(ADMINS, {"username": "other", "email": "", "password_hash": hash_password("x")})
        token = self.login().json()["access_token"]
        response = self.client.post(
            "/api/admin/update",
            json={"currentUsername": "admin", "newUsername": "other"},
            headers={"Authorization": f"Bearer {token}"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Username already taken")


if __name__ == "__main__":
    unittest.main()

from datetime import datetime
from unittest.mock import patch

from django.test import SimpleTestCase

from api.dao import DocumentNotFoundError, GlobalDAO, UserDAO, user_dao
from api.firebase_service import FirestoreUnavailableError

from .fakes import FakeFirestore, FirestoreTestCase


class GlobalDAOTests(FirestoreTestCase):
    def setUp(self):
        super().setUp()
        self.dao = GlobalDAO("meetings", client=self.db)

    def test_create_returns_generated_id_and_sets_server_timestamps(self):
        doc_id = self.dao.create({"title": "Standup", "createdAt": "client", "id": "forged"})

        stored = self.stored("meetings", doc_id)
        self.assertEqual(stored["title"], "Standup")
        self.assertIsInstance(stored["createdAt"], datetime)
        self.assertIsInstance(stored["updatedAt"], datetime)
        self.assertNotIn("id", stored)
        self.assertNotEqual(doc_id, "forged")

    def test_get_by_id_returns_record_with_id(self):
        self.seed("meetings", "m1", title="Retro")

        self.assertEqual(self.dao.get_by_id("m1"), {"id": "m1", "title": "Retro"})

    def test_get_by_id_missing_returns_none(self):
        self.assertIsNone(self.dao.get_by_id("nope"))

    def test_update_patches_fields_and_bumps_updated_at(self):
        self.seed("meetings", "m1", title="Retro", active=True, createdAt="keep")

        self.dao.update("m1", {"active": False, "createdAt": "overwrite"})

        stored = self.stored("meetings", "m1")
        self.assertFalse(stored["active"])
        self.assertEqual(stored["title"], "Retro")
        self.assertEqual(stored["createdAt"], "keep")
        self.assertIsInstance(stored["updatedAt"], datetime)

    def test_update_missing_document_raises(self):
        with self.assertRaises(DocumentNotFoundError):
            self.dao.update("ghost", {"title": "x"})

    def test_delete_reports_whether_anything_was_removed(self):
        self.seed("meetings", "m1", title="Retro")

        self.assertTrue(self.dao.delete("m1"))
        self.assertIsNone(self.stored("meetings", "m1"))
        self.assertFalse(self.dao.delete("m1"))

    def test_get_all_and_filters(self):
        self.seed("meetings", "m1", title="A", active=True)
        self.seed("meetings", "m2", title="B", active=False)

        self.assertEqual(len(self.dao.get_all()), 2)
        self.assertEqual(
            self.dao.get_all({"active": False}),
            [{"id": "m2", "title": "B", "active": False}],
        )

    def test_find_by(self):
        self.seed("meetings", "m1", participants=["u1", "u2"])
        self.seed("meetings", "m2", participants=["u3"])

        found = self.dao.find_by("participants", "array-contains", "u3")

        self.assertEqual([item["id"] for item in found], ["m2"])


class UserDAOTests(FirestoreTestCase):
    def test_create_with_id_uses_given_id(self):
        user_dao.create_with_id("uid-9", {"email": "x@example.com"})

        stored = self.stored("users", "uid-9")
        self.assertEqual(stored["id"], "uid-9")
        self.assertEqual(stored["email"], "x@example.com")
        self.assertIn("createdAt", stored)

    def test_password_is_never_written(self):
        user_dao.create_with_id("uid-9", {"email": "x@example.com", "password": "pw"})
        new_id = user_dao.create({"email": "y@example.com", "password": "pw"})
        user_dao.update("uid-9", {"password": "pw2", "age": 30})

        self.assertNotIn("password", self.stored("users", "uid-9"))
        self.assertNotIn("password", self.stored("users", new_id))
        self.assertEqual(self.stored("users", "uid-9")["age"], 30)

    def test_find_by_email(self):
        self.seed("users", "u1", email="a@example.com")

        self.assertEqual(user_dao.find_by_email("a@example.com")["id"], "u1")
        self.assertIsNone(user_dao.find_by_email("b@example.com"))

    def test_link_provider_does_not_duplicate(self):
        self.seed("users", "u1", oauth=["facebook.com"])

        user_dao.link_provider("u1", "google.com")
        user_dao.link_provider("u1", "google.com")

        self.assertEqual(self.stored("users", "u1")["oauth"], ["facebook.com", "google.com"])


class UnconfiguredStoreTests(SimpleTestCase):
    @patch("api.dao.get_firestore", return_value=None)
    def test_operations_raise_when_firestore_missing(self, _):
        with self.assertRaises(FirestoreUnavailableError):
            UserDAO().get_by_id("u1")

    def test_injected_client_takes_precedence(self):
        db = FakeFirestore()
        with patch("api.dao.get_firestore", return_value=None):
            dao = GlobalDAO("users", client=db)
            dao.create_with_id("u1", {"email": "a@example.com"})
        self.assertIn("u1", db.collection("users").docs)

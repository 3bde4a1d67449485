import unittest

from catalog_backend.db import (
    BANNERS,
    PRODUCT_IMAGES,
    PRODUCTS,
    InMemoryDbClient,
    PostgresDbClient,
)


class DocumentStoreContract:
    db = None

    def test_insert_and_get(self):
        doc = self.db.insert(PRODUCTS, {"prod_id": "FH-1", "product_name": "Mixer"})
        self.assertTrue(doc["id"])
        self.assertEqual(doc["created_at"], doc["updated_at"])
        fetched = self.db.get(PRODUCTS, doc["id"])
        self.assertEqual(fetched["product_name"], "Mixer")
        self.assertIsNone(self.db.get(BANNERS, doc["id"]))

    def test_find_where_and_order(self):
        first = self.db.insert(PRODUCT_IMAGES, {"PRODUCT_ID": "p1", "image_path": "a", "is_main": False})
        second = self.db.insert(PRODUCT_IMAGES, {"PRODUCT_ID": "p1", "image_path": "b", "is_main": True})
        self.db.insert(PRODUCT_IMAGES, {"PRODUCT_ID": "p2", "image_path": "c", "is_main": True})

        newest = self.db.find(PRODUCT_IMAGES, where={"PRODUCT_ID": "p1"}, order_by="-created_at")
        self.assertEqual([d["id"] for d in newest], [second["id"], first["id"]])

        main = self.db.find_one(PRODUCT_IMAGES, where={"PRODUCT_ID": "p1", "is_main": True})
        self.assertEqual(main["image_path"], "b")
        self.assertEqual(self.db.count(PRODUCT_IMAGES, where={"is_main": True}), 2)

    def test_contains_is_case_insensitive_or(self):
        self.db.insert(PRODUCTS, {"product_name": "Blue Mixer", "description": "steel"})
        self.db.insert(PRODUCTS, {"product_name": "Oven", "description": "BLUE flame"})
        self.db.insert(PRODUCTS, {"product_name": "Fryer", "description": "red"})
        found = self.db.find(
            PRODUCTS,
            contains={"product_name": "blue", "description": "blue"},
            order_by="product_name",
        )
        self.assertEqual([d["product_name"] for d in found], ["Blue Mixer", "Oven"])

    def test_projection_keeps_id(self):
        doc = self.db.insert(PRODUCTS, {"prod_id": "FH-9", "product_name": "Grill"})
        (projected,) = self.db.find(PRODUCTS, fields=("prod_id",))
        self.assertEqual(projected, {"id": doc["id"], "prod_id": "FH-9"})

    def test_update_variants(self):
        a = self.db.insert(BANNERS, {"title": "A", "active": True, "order": 0})
        b = self.db.insert(BANNERS, {"title": "B", "active": True, "order": 1})

        updated = self.db.update(BANNERS, a["id"], {"title": "A2", "id": "ignored"})
        self.assertEqual(updated["id"], a["id"])
        self.assertEqual(updated["title"], "A2")
        self.assertGreater(updated["updated_at"], a["updated_at"])
        self.assertIsNone(self.db.update(BANNERS, "missing", {"title": "x"}))

        self.assertEqual(self.db.update_where(BANNERS, {"active": True}, {"active": False}), 2)
        self.assertEqual(self.db.count(BANNERS, where={"active": True}), 0)
        self.assertEqual(self.db.update_many(BANNERS, [b["id"], "missing"], {"order": 5}), 1)
        self.assertEqual(self.db.get(BANNERS, b["id"])["order"], 5)

    def test_delete_variants(self):
        doc = self.db.insert(PRODUCT_IMAGES, {"PRODUCT_ID": "p1", "image_path": "a"})
        self.db.insert(PRODUCT_IMAGES, {"PRODUCT_ID": "p1", "image_path": "b"})
        self.db.insert(PRODUCT_IMAGES, {"PRODUCT_ID": "p2", "image_path": "c"})

        removed = self.db.delete(PRODUCT_IMAGES, doc["id"])
        self.assertEqual(removed["image_path"], "a")
        self.assertIsNone(self.db.delete(PRODUCT_IMAGES, doc["id"]))
        self.assertEqual(self.db.delete_where(PRODUCT_IMAGES, {"PRODUCT_ID": "p1"}), 1)
        self.assertEqual(self.db.count(PRODUCT_IMAGES), 1)

    def test_returned_docs_are_copies(self):
        doc = self.db.insert(PRODUCTS, {"product_info": [{"key": "k", "value": "v"}]})
        doc["product_info"].append({"key": "x", "value": "y"})
        self.assertEqual(len(self.db.get(PRODUCTS, doc["id"])["product_info"]), 1)


class InMemoryDbClientTests(DocumentStoreContract, unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()

    def test_reset(self):
        self.db.insert(PRODUCTS, {"prod_id": "FH-1"})
        self.db.reset()
        self.assertEqual(self.db.find(PRODUCTS), [])


class PostgresDbClientTests(DocumentStoreContract, unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the Postgres client logic.
    """

    def setUp(self):
        self.db = PostgresDbClient("sqlite+pysqlite:///:memory:")


if __name__ == "__main__":
    unittest.main()

import shutil
import tempfile
import unittest
from pathlib import Path

from PIL import Image

from catalog_backend.db import BANNERS, CATEGORIES, PRODUCTS, InMemoryDbClient
from catalog_backend.media.sidecar import MediaMetadata, SidecarStore
from catalog_backend.webp import (
    convert_uploads_to_webp,
    migrate_documents_to_webp,
    replace_extensions,
)


class ConvertUploadsTests(unittest.TestCase):
    def setUp(self):
        self.root = Path(tempfile.mkdtemp())
        (self.root / "products").mkdir()
        Image.new("RGB", (4, 4), "blue").save(self.root / "products" / "pump.jpg")
        Image.new("RGBA", (4, 4), (255, 0, 0, 128)).save(self.root / "products" / "logo.png")
        (self.root / "products" / "manual.pdf").write_bytes(b"%PDF")
        self.sidecars = SidecarStore(self.root)
        self.sidecars.write(
            "products",
            {
                "pump.jpg": MediaMetadata(title="pump.jpg", alt="Blue pump", favorite=True),
                "logo.png": MediaMetadata(title="Logo"),
            },
        )

    def tearDown(self):
        shutil.rmtree(self.root, ignore_errors=True)

    def test_converts_and_copies_metadata(self):
        written = convert_uploads_to_webp(self.root)
        self.assertEqual(
            sorted(p.name for p in written), ["logo.webp", "pump.webp"]
        )
        with Image.open(self.root / "products" / "pump.webp") as converted:
            self.assertEqual(converted.format, "WEBP")
        self.assertTrue((self.root / "products" / "pump.jpg").exists())

        entries = self.sidecars.read("products")
        self.assertEqual(entries["pump.webp"].title, "pump.webp")
        self.assertEqual(entries["pump.webp"].alt, "Blue pump")
        self.assertTrue(entries["pump.webp"].favorite)
        self.assertEqual(entries["logo.webp"].title, "Logo")

    def test_existing_webp_is_skipped(self):
        convert_uploads_to_webp(self.root)
        self.assertEqual(convert_uploads_to_webp(self.root), [])


class MigrateDocumentsTests(unittest.TestCase):
    def test_replace_extensions(self):
        self.assertEqual(replace_extensions("uploads/posts/a.JPG"), "uploads/posts/a.webp")
        self.assertEqual(
            replace_extensions([{"key": "img", "value": "b.jpeg and c.png"}]),
            [{"key": "img", "value": "b.webp and c.webp"}],
        )
        self.assertEqual(replace_extensions("a.pngx"), "a.pngx")
        self.assertIsNone(replace_extensions(None))

    def test_migrates_reference_fields(self):
        db = InMemoryDbClient()
        category = db.insert(
            CATEGORIES, {"category_name": "a.jpg fans", "category_image": "uploads/categories/a.jpg"}
        )
        banner = db.insert(
            BANNERS, {"image": "uploads/banners/h.png", "mobileImage": None}
        )
        db.insert(PRODUCTS, {"product_name": "x", "description": "plain", "product_info": []})

        counts = migrate_documents_to_webp(db)
        self.assertEqual(counts[CATEGORIES], 1)
        self.assertEqual(counts[BANNERS], 1)
        self.assertEqual(counts[PRODUCTS], 0)

        category = db.get(CATEGORIES, category["id"])
        self.assertEqual(category["category_image"], "uploads/categories/a.webp")
        self.assertEqual(category["category_name"], "a.jpg fans")
        self.assertEqual(db.get(BANNERS, banner["id"])["image"], "uploads/banners/h.webp")


if __name__ == "__main__":
    unittest.main()

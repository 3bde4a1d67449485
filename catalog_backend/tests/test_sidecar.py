import json
import shutil
import tempfile
import unittest
from pathlib import Path

from catalog_backend.media.sidecar import MediaMetadata, SidecarStore


class SidecarStoreTests(unittest.TestCase):
    def setUp(self):
        self.root = Path(tempfile.mkdtemp())
        self.store = SidecarStore(self.root)

    def tearDown(self):
        shutil.rmtree(self.root, ignore_errors=True)

    def test_missing_sidecar_reads_empty(self):
        self.assertEqual(self.store.read("products"), {})

    def test_write_then_read(self):
        self.store.write(
            "products",
            {"a.jpg": MediaMetadata(title="Pump", alt="blue pump", favorite=True)},
        )
        entries = self.store.read("products")
        self.assertEqual(entries["a.jpg"].title, "Pump")
        self.assertEqual(entries["a.jpg"].alt, "blue pump")
        self.assertTrue(entries["a.jpg"].favorite)

        raw = json.loads(self.store.path_for("products").read_text(encoding="utf-8"))
        self.assertEqual(
            raw["a.jpg"],
            {
                "title": "Pump",
                "alt": "blue pump",
                "caption": "",
                "description": "",
                "favorite": True,
            },
        )

    def test_write_leaves_no_temp_files(self):
        self.store.write("posts", {"b.png": MediaMetadata.default_for("b.png")})
        names = sorted(p.name for p in (self.root / "posts").iterdir())
        self.assertEqual(names, ["media.meta.json"])

    def test_corrupt_sidecar_reads_empty(self):
        path = self.store.path_for("banners")
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("catalog_backend.media.sidecar", level="WARNING"):
            self.assertEqual(self.store.read("banners"), {})

    def test_non_object_sidecar_reads_empty(self):
        path = self.store.path_for("banners")
        path.parent.mkdir(parents=True)
        path.write_text("[1, 2]", encoding="utf-8")
        with self.assertLogs("catalog_backend.media.sidecar", level="WARNING"):
            self.assertEqual(self.store.read("banners"), {})

    def test_partial_entries_get_defaults(self):
        path = self.store.path_for("products")
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"x.jpg": {"title": "X"}}), encoding="utf-8")
        meta = self.store.read("products")["x.jpg"]
        self.assertEqual(meta.title, "X")
        self.assertEqual(meta.caption, "")
        self.assertFalse(meta.favorite)

    def test_matches_text_fields_only(self):
        meta = MediaMetadata(title="Red", caption="Dark BLUE finish")
        self.assertTrue(meta.matches("blue"))
        self.assertFalse(meta.matches("green"))

    def test_lock_is_reentrant(self):
        with self.store.locked("products"):
            with self.store.locked("products"):
                self.store.write("products", {})
        self.assertEqual(self.store.read("products"), {})


if __name__ == "__main__":
    unittest.main()

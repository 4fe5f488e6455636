import os
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.http import Http404
from django.test import RequestFactory, override_settings
from rest_framework.test import APISimpleTestCase

from media.views import serve_stored_file


def make_file_bytes(size_bytes: int, seed: int = 123) -> bytes:
    # deterministic bytes; only the extension decides the reported type
    return (seed.to_bytes(4, "big") * ((size_bytes // 4) + 1))[:size_bytes]


MOCK_IMAGES = {
    "castle_small.jpg": 2_048,
    "castle_large.jpeg": 4_096,
    "icon.png": 512,
    "spinner.gif": 256,
    "banner.webp": 1_024,
}
MOCK_OTHERS = {
    "not-an-image-file.js": 64,
    "notes.txt": 32,
}


class TestMediaAPI(APISimpleTestCase):
    """
    End-to-end tests for the media API:
        - Directory listings (root, sub folders, empty folders, with/without trailing slash)
        - Single file info for images, 404 for other files
        - 404 for missing paths and traversal attempts
        - Uploads: accepted images, extension handling, 422 on rejection

    Each test builds its own storage root in a temp dir:
        <root>/mocks/             5 images + 2 non-image files
        <root>/mocks/empty/       (no files)
        <root>/mocks/venice/      2 images
    """

    def setUp(self):
        # fresh MEDIA_ROOT per test
        self.temp_media_dir = tempfile.mkdtemp(prefix="media_")
        self.addCleanup(lambda: shutil.rmtree(self.temp_media_dir, ignore_errors=True))

        self.overrides = override_settings(MEDIA_ROOT=self.temp_media_dir)
        self.overrides.enable()
        self.addCleanup(self.overrides.disable)

        self.mocks_dir = os.path.join(self.temp_media_dir, "mocks")
        for name, size in {**MOCK_IMAGES, **MOCK_OTHERS}.items():
            self._write(os.path.join("mocks", name), make_file_bytes(size))
        os.makedirs(os.path.join(self.mocks_dir, "empty"))
        self._write(os.path.join("mocks", "venice", "canal.jpg"), make_file_bytes(300, seed=1))
        self._write(os.path.join("mocks", "venice", "bridge.png"), make_file_bytes(400, seed=2))

        self.base = "/api/media/"
        self.upload_url = "/api/upload"

    # ------------------ helpers ------------------
    def _write(self, relative, content: bytes):
        path = os.path.join(self.temp_media_dir, relative)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as fh:
            fh.write(content)
        return path

    def _get(self, path: str):
        return self.client.get(path, HTTP_ACCEPT="application/json")

    def _upload(self, name: str, content: bytes, content_type: str):
        f = SimpleUploadedFile(name, content, content_type=content_type)
        return self.client.post(self.upload_url, {"uploaded_file": f}, format="multipart")

    def _by_name(self, items):
        return {item["name"]: item for item in items}

    # ------------------ listing ------------------
    '''
        Root listing
            The mocks folder shows up as a DIRECTORY entry without size or extension.
    '''
    def test_01_root_lists_mocks_directory(self):
        r = self._get(self.base)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r["Content-Type"], "application/json")
        body = r.json()
        self.assertIsInstance(body, list)
        mocks = self._by_name(body)["mocks"]
        self.assertEqual(mocks["mimetype"], "DIRECTORY")
        self.assertIsNone(mocks["extension"])
        self.assertIsNone(mocks["size"])
        self.assertIn("mtime", mocks)

    '''
        Folder listing
            All 7 files plus the 2 sub folders; children are not filtered by type.
    '''
    def test_02_lists_every_child_of_a_folder(self):
        r = self._get(f"{self.base}mocks/")
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(len(body), len(MOCK_IMAGES) + len(MOCK_OTHERS) + 2)
        images = [item for item in body if item["mimetype"].startswith("image/")]
        self.assertEqual(len(images), len(MOCK_IMAGES))

        by_name = self._by_name(body)
        self.assertEqual(by_name["icon.png"]["size"], MOCK_IMAGES["icon.png"])
        self.assertEqual(by_name["castle_large.jpeg"]["extension"], "jpg")
        self.assertEqual(by_name["castle_large.jpeg"]["mimetype"], "image/jpeg")
        self.assertEqual(by_name["notes.txt"]["mimetype"], "text/plain")
        self.assertEqual(by_name["venice"]["mimetype"], "DIRECTORY")

    def test_03_empty_folder_is_an_empty_array(self):
        r = self._get(f"{self.base}mocks/empty/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), [])

    def test_04_sub_folder_contents(self):
        r = self._get(f"{self.base}mocks/venice/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(sorted(item["name"] for item in r.json()), ["bridge.png", "canal.jpg"])

    '''
        Trailing slash
            /mocks and /mocks/ (and the bare prefix for the root) return the same entries.
    '''
    def test_05_trailing_slash_is_optional(self):
        with_slash = self._get(f"{self.base}mocks/")
        without_slash = self._get(f"{self.base}mocks")
        self.assertEqual(without_slash.status_code, 200)
        self.assertEqual(
            sorted(i["name"] for i in with_slash.json()),
            sorted(i["name"] for i in without_slash.json()),
        )

        root = self._get("/api/media")
        self.assertEqual(root.status_code, 200)
        self.assertIn("mocks", self._by_name(root.json()))

    # ------------------ single file ------------------
    def test_06_image_file_info_is_an_object(self):
        r = self._get(f"{self.base}mocks/castle_small.jpg")
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertIsInstance(body, dict)
        self.assertEqual(body["name"], "castle_small.jpg")
        self.assertEqual(body["size"], MOCK_IMAGES["castle_small.jpg"])
        self.assertEqual(body["mimetype"], "image/jpeg")
        self.assertEqual(body["extension"], "jpg")
        self.assertTrue(body["mtime"].endswith("Z"))

    '''
        404s
            Missing paths, non-image files and traversal attempts all answer 404 with an empty body.
    '''
    def test_07_missing_path_is_404_with_empty_body(self):
        r = self._get(f"{self.base}inexistent")
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.content, b"")

    def test_08_non_image_file_is_404(self):
        r = self._get(f"{self.base}mocks/not-an-image-file.js")
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.content, b"")

    def test_09_traversal_is_404(self):
        outside = tempfile.mkdtemp(prefix="outside_")
        self.addCleanup(lambda: shutil.rmtree(outside, ignore_errors=True))
        name = os.path.basename(outside)

        for path in (
            f"{self.base}../{name}/",
            f"{self.base}mocks/../../{name}",
            f"{self.base}%2e%2e/{name}",
            f"{self.base}mocks/..%2f..%2f{name}",
        ):
            with self.subTest(path=path):
                r = self._get(path)
                self.assertEqual(r.status_code, 404)
                self.assertEqual(r.content, b"")

    def test_10_symlink_out_of_the_root_is_404(self):
        outside = tempfile.mkdtemp(prefix="outside_")
        self.addCleanup(lambda: shutil.rmtree(outside, ignore_errors=True))
        with open(os.path.join(outside, "secret.png"), "wb") as fh:
            fh.write(b"x")
        try:
            os.symlink(outside, os.path.join(self.temp_media_dir, "escape"))
        except (OSError, NotImplementedError):
            self.skipTest("symlinks not supported here")

        self.assertEqual(self._get(f"{self.base}escape/").status_code, 404)
        self.assertEqual(self._get(f"{self.base}escape/secret.png").status_code, 404)

    # ------------------ uploads ------------------
    '''
        Upload
            image/png named "photo" is stored as photo.png; the response is 201 with an empty body.
    '''
    def test_11_upload_appends_extension(self):
        r = self._upload("photo", make_file_bytes(1_000), "image/png")
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.content, b"")
        self.assertEqual(r["Location"], f"{self.base}photo.png")
        self.assertTrue(os.path.isfile(os.path.join(self.temp_media_dir, "photo.png")))

        listed = self._get(f"{self.base}photo.png")
        self.assertEqual(listed.status_code, 200)
        self.assertEqual(listed.json()["size"], 1_000)

    def test_12_upload_keeps_existing_extension(self):
        r = self._upload("photo.png", make_file_bytes(10), "image/png")
        self.assertEqual(r.status_code, 201)
        self.assertTrue(os.path.isfile(os.path.join(self.temp_media_dir, "photo.png")))
        self.assertFalse(os.path.exists(os.path.join(self.temp_media_dir, "photo.png.png")))

    def test_13_upload_rejects_non_images(self):
        before = set(os.listdir(self.temp_media_dir))
        r = self._upload("evil.js", b"alert(1)", "application/javascript")
        self.assertEqual(r.status_code, 422)
        self.assertEqual(r.json(), {"error": "The uploaded file must be an image"})
        self.assertEqual(set(os.listdir(self.temp_media_dir)), before)

    def test_14_upload_without_file_is_422(self):
        r = self.client.post(self.upload_url, {}, format="multipart")
        self.assertEqual(r.status_code, 422)
        self.assertEqual(r.json(), {"error": "The uploaded file must be an image"})

    def test_15_upload_does_not_overwrite(self):
        self.assertEqual(self._upload("dup.gif", b"first", "image/gif").status_code, 201)
        r = self._upload("dup.gif", b"second", "image/gif")
        self.assertEqual(r.status_code, 201)
        self.assertNotEqual(r["Location"], f"{self.base}dup.gif")
        with open(os.path.join(self.temp_media_dir, "dup.gif"), "rb") as fh:
            self.assertEqual(fh.read(), b"first")

    # ------------------ links and odd paths ------------------
    def _outside_dir_with(self, name: str, content: bytes):
        outside = tempfile.mkdtemp(prefix="outside_")
        self.addCleanup(lambda: shutil.rmtree(outside, ignore_errors=True))
        with open(os.path.join(outside, name), "wb") as fh:
            fh.write(content)
        return outside

    def _link(self, target: str, relative: str):
        try:
            os.symlink(target, os.path.join(self.temp_media_dir, relative))
        except (OSError, NotImplementedError):
            self.skipTest("symlinks not supported here")

    '''
        Links inside the storage root
            Children linking out of the root are left out of listings;
            links that stay inside the root are listed normally.
    '''
    def test_16_listing_skips_links_out_of_the_root(self):
        outside = self._outside_dir_with("secret.png", b"TOP-SECRET-BYTES")
        self._link(os.path.join(outside, "secret.png"), "leak.png")
        self._link(outside, "escape")
        self._link(os.path.join(self.mocks_dir, "icon.png"), "icon-link.png")

        r = self._get(self.base)
        self.assertEqual(r.status_code, 200)
        names = set(self._by_name(r.json()))
        self.assertNotIn("leak.png", names)
        self.assertNotIn("escape", names)
        self.assertIn("icon-link.png", names)
        self.assertIn("mocks", names)

    '''
        Raw file serving
            /uploads/<path> serves stored bytes, but never through a link out of the root.
    '''
    def test_17_raw_files_do_not_follow_links_out_of_the_root(self):
        outside = self._outside_dir_with("secret.png", b"TOP-SECRET-BYTES")
        self._link(outside, "escape")
        factory = RequestFactory()

        r = serve_stored_file(factory.get("/uploads/mocks/icon.png"), "mocks/icon.png")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(b"".join(r.streaming_content), make_file_bytes(MOCK_IMAGES["icon.png"]))

        for path in ("escape/secret.png", "../secret.png", "mocks/missing.png", "mocks"):
            with self.subTest(path=path):
                with self.assertRaises(Http404):
                    serve_stored_file(factory.get(f"/uploads/{path}"), path)

    def test_18_newline_in_path_is_404_with_empty_body(self):
        r = self._get(f"{self.base}mocks%0A")
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.content, b"")

"""
Image resize adapter and upload validation.
"""

import io

import pytest
from PIL import Image

from axotl.adapters.images.pillow_resizer import PillowImageResizer
from axotl.domain.errors import ValidationError
from axotl.domain.uploads import UploadedFile
from axotl.rules.models import ResizeBox


def _size(data: bytes) -> tuple[int, int]:
    im = Image.open(io.BytesIO(data))
    assert im.format == "JPEG"
    return im.size


class TestPillowImageResizer:
    def test_inside_keeps_aspect_ratio(self, make_image):
        out = PillowImageResizer().resize(make_image(size=(2400, 1200)), 1200, 1200, "inside")
        assert _size(out) == (1200, 600)

    def test_inside_never_enlarges(self, make_image):
        out = PillowImageResizer().resize(make_image(size=(300, 200)), 1200, 1200, "inside")
        assert _size(out) == (300, 200)

    def test_cover_crops_to_box(self, make_image):
        out = PillowImageResizer().resize(make_image(size=(900, 600)), 500, 500, "cover")
        assert _size(out) == (500, 500)

    def test_transparent_png_becomes_jpeg(self):
        buf = io.BytesIO()
        Image.new("RGBA", (40, 40), (0, 0, 0, 0)).save(buf, format="PNG")
        assert _size(PillowImageResizer().resize(buf.getvalue(), 100, 100)) == (40, 40)

    def test_not_an_image(self):
        with pytest.raises(ValueError):
            PillowImageResizer().resize(b"definitely not an image", 10, 10)

    def test_unknown_fit(self, make_image):
        with pytest.raises(ValueError):
            PillowImageResizer().resize(make_image(), 10, 10, "stretch")


class TestImageUploadService:
    box = ResizeBox(width=1200, height=1200)

    def test_store_writes_jpeg_under_folder(self, uploads, filestore, png_upload):
        path = uploads.store(png_upload, self.box, "portadas")
        assert path.startswith("portadas/")
        assert path.endswith(".jpg")
        assert _size(filestore.get(path)) == (64, 48)

    def test_empty_file(self, uploads):
        with pytest.raises(ValidationError) as exc:
            uploads.store(UploadedFile("a.png", "image/png", b""), self.box, "portadas")
        assert exc.value.code == "empty_file"

    def test_too_large(self, uploads, rules):
        data = b"x" * (rules.uploads.max_upload_bytes + 1)
        with pytest.raises(ValidationError) as exc:
            uploads.validate(UploadedFile("a.png", "image/png", data))
        assert exc.value.code == "file_too_large"

    def test_extension_not_allowed(self, uploads, make_image):
        with pytest.raises(ValidationError) as exc:
            uploads.validate(UploadedFile("a.bmp", "image/png", make_image()), field="cover_image")
        assert exc.value.code == "extension_not_allowed"
        assert exc.value.field == "cover_image"

    def test_mime_not_allowed(self, uploads, make_image):
        with pytest.raises(ValidationError) as exc:
            uploads.validate(UploadedFile("a.png", "application/pdf", make_image()))
        assert exc.value.code == "mime_not_allowed"

    def test_undecodable_content(self, uploads, filestore, tmp_path):
        with pytest.raises(ValidationError) as exc:
            uploads.store(UploadedFile("a.png", "image/png", b"not a png"), self.box, "portadas")
        assert exc.value.code == "invalid_image"
        assert not (tmp_path / "uploads" / "portadas").exists()

    def test_discard_swallows_failures(self, uploads, caplog):
        uploads.discard(None)
        uploads.discard("../outside.jpg")
        assert "Could not delete stored file" in caplog.text

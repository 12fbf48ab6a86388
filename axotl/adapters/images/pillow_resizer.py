import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)


class PillowImageResizer:
    """Resizes uploads and re-encodes them as JPEG."""

    def __init__(self, quality: int = 80):
        self.quality = quality

    def resize(self, data: bytes, width: int, height: int, fit: str = "inside") -> bytes:
        try:
            im = Image.open(io.BytesIO(data))
            im.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ValueError("Uploaded file is not a readable image") from e

        im = ImageOps.exif_transpose(im).convert("RGB")
        if fit == "cover":
            im = ImageOps.fit(im, (width, height), Image.LANCZOS)
        elif fit == "inside":
            # thumbnail never enlarges
            im.thumbnail((width, height), Image.LANCZOS)
        else:
            raise ValueError(f"Unknown fit mode: {fit}")

        buf = io.BytesIO()
        im.save(buf, format="JPEG", quality=self.quality)
        out = buf.getvalue()
        logger.debug("Resized image to %dx%d (%d bytes)", im.width, im.height, len(out))
        return out

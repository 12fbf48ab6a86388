from typing import Protocol


class ImageResizePort(Protocol):
    def resize(self, data: bytes, width: int, height: int, fit: str = "inside") -> bytes:
        """
        Resize image bytes into a width x height box and re-encode as JPEG.

        fit="inside" keeps the aspect ratio without enlarging;
        fit="cover" fills the box and crops the overflow around the center.
        Raises ValueError if the bytes are not a decodable image.
        """
        ...

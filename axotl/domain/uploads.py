from dataclasses import dataclass


@dataclass(frozen=True)
class UploadedFile:
    """An uploaded file as received from the client, before any processing."""

    filename: str
    content_type: str
    data: bytes

import logging
from pathlib import Path
from uuid import uuid4

from axotl.domain.errors import ValidationError
from axotl.domain.uploads import UploadedFile
from axotl.ports.filestore import FileStorePort
from axotl.ports.images import ImageResizePort
from axotl.rules.models import ResizeBox, UploadsRules

logger = logging.getLogger(__name__)


class ImageUploadService:
    """
    Validates an image upload, resizes it and writes it to the file store.

    Stored files are always JPEG and are named by a random id under a folder
    (portadas, publicaciones, perfil).
    """

    def __init__(
        self,
        filestore: FileStorePort,
        resizer: ImageResizePort,
        rules: UploadsRules,
    ):
        self.filestore = filestore
        self.resizer = resizer
        self.rules = rules

    def validate(self, upload: UploadedFile, field: str = "image") -> None:
        if not upload.data:
            raise ValidationError("El archivo está vacío", field=field, code="empty_file")

        if len(upload.data) > self.rules.max_upload_bytes:
            raise ValidationError(
                f"El archivo supera el límite de {self.rules.max_upload_bytes} bytes",
                field=field,
                code="file_too_large",
            )

        ext = Path(upload.filename).suffix.lower()
        if ext not in self.rules.allowlist_extensions:
            raise ValidationError(
                f"Extensión '{ext}' no permitida", field=field, code="extension_not_allowed"
            )

        if upload.content_type not in self.rules.allowlist_mime_types:
            raise ValidationError(
                f"Tipo MIME '{upload.content_type}' no permitido",
                field=field,
                code="mime_not_allowed",
            )

    def store(self, upload: UploadedFile, box: ResizeBox, folder: str, field: str = "image") -> str:
        """Validate, resize and save. Returns the stored path."""
        self.validate(upload, field)
        try:
            data = self.resizer.resize(upload.data, box.width, box.height, box.fit)
        except ValueError as e:
            raise ValidationError(
                "Solo se permiten imágenes válidas", field=field, code="invalid_image"
            ) from e

        path = self.filestore.save(f"{folder}/{uuid4().hex}.jpg", data)
        logger.info("Stored image %s (%d bytes)", path, len(data))
        return path

    def discard(self, path: str | None) -> None:
        """Delete a stored file. Failures are logged, never raised."""
        if not path:
            return
        try:
            self.filestore.delete(path)
        except (OSError, ValueError):
            logger.warning("Could not delete stored file %s", path, exc_info=True)

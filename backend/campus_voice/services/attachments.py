import logging
import secrets
import time
from pathlib import Path

from fastapi import UploadFile

from campus_voice.config import get_settings
from campus_voice.core.exceptions import BadRequestError, FileTooLargeError, FileTypeError

logger = logging.getLogger(__name__)


class AttachmentStorage:
    """
    Local-disk storage for feedback attachments.

    Every file in a batch is validated (count, MIME type, size) before any of
    them is written, so a rejected upload leaves nothing behind.
    """

    def __init__(
        self,
        upload_dir: str | None = None,
        max_file_size: int | None = None,
        max_files: int | None = None,
        allowed_types: list[str] | None = None,
    ):
        settings = get_settings()
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_file_size = max_file_size or settings.MAX_FILE_SIZE
        self.max_files = max_files or settings.MAX_ATTACHMENTS
        self.allowed_types = set(allowed_types or settings.ALLOWED_ATTACHMENT_TYPES)

    @staticmethod
    def _stored_name(original: str) -> str:
        suffix = Path(original).suffix.lower()
        return f"attachments-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"

    async def save_all(self, files: list[UploadFile] | None) -> list[str]:
        """Validate and store uploads; returns stored filenames in upload order."""
        files = list(files or [])
        if not files:
            return []
        if len(files) > self.max_files:
            raise BadRequestError(f"At most {self.max_files} attachments are allowed")

        payloads: list[tuple[str, bytes]] = []
        for upload in files:
            if upload.content_type not in self.allowed_types:
                raise FileTypeError("Invalid file type")
            # one byte past the limit is enough to reject the file
            content = await upload.read(self.max_file_size + 1)
            if len(content) > self.max_file_size:
                raise FileTooLargeError("File too large")
            payloads.append((upload.filename, content))

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        stored: list[str] = []
        for original, content in payloads:
            name = self._stored_name(original)
            (self.upload_dir / name).write_bytes(content)
            stored.append(name)
        logger.info("Stored %d attachment(s) in %s", len(stored), self.upload_dir)
        return stored

    def discard(self, filenames: list[str]) -> None:
        """Remove stored files whose feedback row was never written."""
        for name in filenames:
            (self.upload_dir / name).unlink(missing_ok=True)
        if filenames:
            logger.warning("Discarded %d orphaned attachment(s)", len(filenames))

"""
File Resolver Module

Turns a user-supplied local path or remote URL into a ResolvedFile: an open
binary stream plus the display name, mime type and byte size the upload
pipeline needs. Remote files are streamed to a private temp file rather than
buffered in memory.
"""

import mimetypes
import os
import tempfile
from typing import Optional, Tuple
from urllib.parse import urlparse

import requests
from PIL import Image, UnidentifiedImageError

from config import settings
from data.models import DEFAULT_MIME_TYPE, ResolvedFile
from utils.exceptions import MediaUploadError, UploadStep
from utils.helpers import is_valid_url
from utils.logger import get_logger

logger = get_logger(__name__)


def detect_mime_type(path: str, name: Optional[str] = None) -> str:
    """
    Detect a file's mime type.

    Image content is sniffed with Pillow first; otherwise the type is guessed
    from the file name, falling back to application/octet-stream.
    """
    try:
        with Image.open(path) as image:
            mime_type = image.get_format_mimetype()
        if mime_type:
            return mime_type
    except (UnidentifiedImageError, OSError, ValueError):
        pass

    guessed, _ = mimetypes.guess_type(name or path)
    return guessed or DEFAULT_MIME_TYPE


def _remove_file(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


class FileResolver:
    """Resolves local paths and remote URLs into readable files."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = (10, 30),
        chunk_size: int = settings.DOWNLOAD_CHUNK_SIZE
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.chunk_size = chunk_size

    def resolve(self, path: str) -> ResolvedFile:
        """
        Resolve a local path or URL.

        Args:
            path: Existing local file path, or an http(s) URL.

        Returns:
            ResolvedFile: Open file description; the caller must close it.

        Raises:
            MediaUploadError: At step signed_url when the input cannot be read.
        """
        if os.path.exists(path):
            return self._resolve_local(path)

        if is_valid_url(path):
            return self._resolve_remote(path)

        raise MediaUploadError(f"File not found: {path}", UploadStep.SIGNED_URL)

    def _resolve_local(self, path: str) -> ResolvedFile:
        name = os.path.basename(path)
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise MediaUploadError(f"Cannot open file: {path}", UploadStep.SIGNED_URL) from e

        try:
            size = os.fstat(stream.fileno()).st_size
            mime_type = detect_mime_type(path, name)
        except BaseException:
            stream.close()
            raise

        logger.debug(f"Resolved local file {path} ({mime_type}, {size} bytes)")
        return ResolvedFile(name=name, mime_type=mime_type, size=size, stream=stream, path=path)

    def _resolve_remote(self, url: str) -> ResolvedFile:
        try:
            head = self.session.head(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise MediaUploadError(f"Cannot access remote file: {url}", UploadStep.SIGNED_URL) from e

        if not 200 <= head.status_code < 300:
            raise MediaUploadError(f"Cannot access remote file: {url}", UploadStep.SIGNED_URL)

        content_length = self._content_length(head.headers.get("Content-Length"))
        content_type = (head.headers.get("Content-Type") or "").split(";")[0].strip()
        name = os.path.basename(urlparse(url).path) or "file"

        fd, temp_path = tempfile.mkstemp(prefix=settings.TEMP_FILE_PREFIX)
        try:
            self._download(url, fd)
            try:
                stream = open(temp_path, "rb")
            except OSError as e:
                raise MediaUploadError(
                    f"Cannot open downloaded file: {url}", UploadStep.SIGNED_URL
                ) from e
        except BaseException:
            # The temp file must not outlive a failed or cancelled download
            _remove_file(temp_path)
            raise

        size = content_length if content_length > 0 else os.path.getsize(temp_path)
        mime_type = content_type or detect_mime_type(temp_path, name)

        logger.debug(f"Downloaded {url} to {temp_path} ({mime_type}, {size} bytes)")
        return ResolvedFile(
            name=name,
            mime_type=mime_type,
            size=size,
            stream=stream,
            path=temp_path,
            is_temporary=True,
        )

    def _download(self, url: str, fd: int) -> None:
        with os.fdopen(fd, "wb") as sink:
            try:
                response = self.session.get(url, stream=True, timeout=self.timeout)
            except requests.RequestException as e:
                raise MediaUploadError(f"Cannot download remote file: {url}", UploadStep.SIGNED_URL) from e

            try:
                if not 200 <= response.status_code < 300:
                    raise MediaUploadError(f"Cannot download remote file: {url}", UploadStep.SIGNED_URL)
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        sink.write(chunk)
            except requests.RequestException as e:
                raise MediaUploadError(f"Cannot download remote file: {url}", UploadStep.SIGNED_URL) from e
            finally:
                response.close()

    @staticmethod
    def _content_length(value) -> int:
        try:
            return int(value or 0)
        except (TypeError, ValueError):
            return 0

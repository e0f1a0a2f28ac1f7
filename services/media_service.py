"""
Media Resource

Uploads a local file or remote URL in three steps:

1. signed_url   - POST /upload_media for a one-time storage slot
2. s3_upload    - PUT the raw bytes to the signed storage URL
3. confirmation - GET /upload_media/status for the reusable upload token

Each failure is raised as a MediaUploadError tagged with the failing step.
The resolved file is released exactly once, whichever step fails.
"""

from typing import Any, Dict, Optional, Tuple

import requests

from data.models import MediaUpload, ResolvedFile
from services.file_resolver import FileResolver
from services.protocols import SocialBuClientProtocol
from utils.exceptions import MediaUploadError, SocialBuError, UploadStep
from utils.logger import get_logger

logger = get_logger(__name__)


class MediaResource:
    """Media upload pipeline bound to a SocialBu client."""

    def __init__(
        self,
        client: SocialBuClientProtocol,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = (10, 30),
        resolver: Optional[FileResolver] = None
    ):
        """
        Args:
            client: Client used for the authenticated API calls (steps 1 and 3).
            session: Plain HTTP session for the storage PUT and remote downloads.
            timeout: (connect, read) timeout for storage and download requests.
            resolver: File resolver; built from the session when omitted.
        """
        self.client = client
        self.session = session or requests.Session()
        self.timeout = timeout
        self.resolver = resolver or FileResolver(self.session, timeout)

    def upload(self, path: str) -> MediaUpload:
        """
        Upload a media file and return its attachment token.

        Args:
            path: Local file path or http(s) URL.

        Returns:
            MediaUpload: The confirmed upload, usable as a post attachment.

        Raises:
            MediaUploadError: If any step fails; ``step`` names which one.
        """
        with self.resolver.resolve(path) as file:
            signed = self._request_signed_url(file)
            self._upload_to_storage(signed["signed_url"], file)
            return self._confirm_upload(signed, file)

    def _request_signed_url(self, file: ResolvedFile) -> Dict[str, Any]:
        logger.debug(f"Requesting signed upload URL for {file.name} ({file.mime_type})")
        try:
            signed = self.client.post("/upload_media", {
                "name": file.name,
                "mime_type": file.mime_type,
            })
        except SocialBuError as e:
            logger.warning(f"Signed URL request failed for {file.name}: {e}")
            raise MediaUploadError.at_step(UploadStep.SIGNED_URL, e) from e

        if not signed.get("signed_url"):
            raise MediaUploadError(
                "Media upload slot response did not include a signed URL.",
                UploadStep.SIGNED_URL,
                response=signed,
            )
        return signed

    def _upload_to_storage(self, signed_url: str, file: ResolvedFile) -> None:
        logger.debug(f"Uploading {file.size} bytes of {file.name} to storage")
        headers = {
            "Content-Type": file.mime_type,
            "Content-Length": str(file.size),
            "x-amz-acl": "private",
        }
        try:
            response = self.session.put(signed_url, data=file.stream, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Storage upload of {file.name} failed: {e}")
            raise MediaUploadError.at_step(UploadStep.S3_UPLOAD, e) from e

        if not 200 <= response.status_code < 300:
            cause = SocialBuError(
                f"Failed to upload to storage: {response.text}",
                response.status_code,
                {"body": response.text},
            )
            logger.warning(f"Storage rejected {file.name} with status {response.status_code}")
            raise MediaUploadError.at_step(UploadStep.S3_UPLOAD, cause) from cause

    def _confirm_upload(self, signed: Dict[str, Any], file: ResolvedFile) -> MediaUpload:
        logger.debug(f"Confirming upload of {file.name}")
        try:
            status = self.client.get("/upload_media/status", {"key": signed.get("key")})
        except SocialBuError as e:
            logger.warning(f"Upload confirmation failed for {file.name}: {e}")
            raise MediaUploadError.at_step(UploadStep.CONFIRMATION, e) from e

        upload_token = status.get("upload_token") or ""
        if not upload_token:
            raise MediaUploadError(
                "Media upload confirmation did not return an upload token. "
                "The file may still be processing.",
                UploadStep.CONFIRMATION,
                response=status,
            )

        logger.info(f"Uploaded {file.name} ({file.mime_type}, {file.size} bytes)")
        return MediaUpload(
            upload_token=upload_token,
            key=signed.get("key") or "",
            url=signed.get("url") or "",
            secure_key=signed.get("secure_key") or "",
            mime_type=file.mime_type,
            name=file.name,
        )

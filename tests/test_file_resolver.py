"""
Tests for the File Resolver

Tests cover local file resolution, remote download to a temp file, mime type
detection and the removal of temp files on failure.
"""

import pytest
import tempfile
import requests
import sys
import os

from PIL import Image

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from conftest import make_response
from services.file_resolver import FileResolver, detect_mime_type
from utils.exceptions import MediaUploadError, UploadStep

REMOTE_URL = "https://cdn.example.com/media/pic.png"


@pytest.fixture
def temp_dir(tmp_path, monkeypatch):
    """Redirect temp files into an isolated directory so leftovers can be counted."""
    directory = tmp_path / "temp"
    directory.mkdir()
    monkeypatch.setattr(tempfile, 'tempdir', str(directory))
    return directory


@pytest.fixture
def resolver(session):
    return FileResolver(session=session, timeout=(1, 2))


# =============================================================================
# Mime Type Detection Tests
# =============================================================================

class TestDetectMimeType:
    """Tests for detect_mime_type."""

    def test_sniffs_image_content_regardless_of_extension(self, tmp_path):
        path = tmp_path / "upload.bin"
        Image.new('RGB', (2, 2)).save(path, 'PNG')

        assert detect_mime_type(str(path)) == 'image/png'

    def test_falls_back_to_extension(self, tmp_path):
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"not really a video")

        assert detect_mime_type(str(path)) == 'video/mp4'

    def test_uses_display_name_for_extension(self, tmp_path):
        path = tmp_path / "socialbu_abc123"
        path.write_bytes(b"%PDF-1.4")

        assert detect_mime_type(str(path), 'report.pdf') == 'application/pdf'

    def test_unknown_type_is_octet_stream(self, tmp_path):
        path = tmp_path / "data.zzz"
        path.write_bytes(b"\x00\x01")

        assert detect_mime_type(str(path)) == 'application/octet-stream'


# =============================================================================
# Local File Tests
# =============================================================================

class TestResolveLocal:
    """Tests for resolving local paths."""

    def test_resolves_name_size_and_type(self, resolver, media_file):
        with resolver.resolve(media_file) as resolved:
            assert resolved.name == 'photo.jpg'
            assert resolved.size == len(b"fake image bytes")
            assert resolved.mime_type == 'image/jpeg'
            assert resolved.stream.read() == b"fake image bytes"
            assert not resolved.is_temporary

        assert resolved.stream.closed
        assert os.path.exists(media_file)

    def test_missing_file_raises_at_signed_url(self, resolver):
        with pytest.raises(MediaUploadError) as exc_info:
            resolver.resolve('/no/such/file.jpg')

        assert exc_info.value.step == UploadStep.SIGNED_URL
        assert str(exc_info.value) == 'File not found: /no/such/file.jpg'

    def test_non_http_url_is_not_fetched(self, resolver, session):
        with pytest.raises(MediaUploadError):
            resolver.resolve('ftp://example.com/file.jpg')

        assert session.calls == []


# =============================================================================
# Remote File Tests
# =============================================================================

class TestResolveRemote:
    """Tests for resolving remote URLs."""

    def test_downloads_to_temp_file(self, resolver, session, temp_dir):
        session.add('HEAD', 'cdn.example.com/media/pic.png', make_response(
            headers={'Content-Length': '5', 'Content-Type': 'image/png; charset=binary'}))
        session.add('GET', 'cdn.example.com/media/pic.png', make_response(content=b'12345', headers={}))

        resolved = resolver.resolve(REMOTE_URL)

        assert resolved.name == 'pic.png'
        assert resolved.mime_type == 'image/png'
        assert resolved.size == 5
        assert resolved.is_temporary
        assert resolved.stream.read() == b'12345'
        assert os.path.dirname(resolved.path) == str(temp_dir)
        assert os.path.basename(resolved.path).startswith('socialbu_')

        resolved.close()

        assert not os.path.exists(resolved.path)
        assert list(temp_dir.iterdir()) == []

    def test_download_is_streamed(self, resolver, session, temp_dir):
        session.add('HEAD', 'pic.png', make_response(headers={}))
        session.add('GET', 'pic.png', make_response(content=b'12345', headers={}))

        with resolver.resolve(REMOTE_URL):
            pass

        get_call = session.calls_to('GET', 'pic.png')[0]
        assert get_call['stream'] is True
        assert get_call['timeout'] == (1, 2)

    def test_size_and_type_fall_back_to_downloaded_file(self, resolver, session, temp_dir):
        session.add('HEAD', 'pic.png', make_response(headers={}))
        session.add('GET', 'pic.png', make_response(content=b'1234567', headers={}))

        with resolver.resolve(REMOTE_URL) as resolved:
            assert resolved.size == 7
            assert resolved.mime_type == 'image/png'

    def test_url_without_path_is_named_file(self, resolver, session, temp_dir):
        session.add('HEAD', 'example.com', make_response(headers={}))
        session.add('GET', 'example.com', make_response(content=b'x', headers={}))

        with resolver.resolve('https://example.com') as resolved:
            assert resolved.name == 'file'

    def test_head_failure_raises_before_download(self, resolver, session, temp_dir):
        session.add('HEAD', 'pic.png', make_response(status_code=404, headers={}))

        with pytest.raises(MediaUploadError) as exc_info:
            resolver.resolve(REMOTE_URL)

        assert exc_info.value.step == UploadStep.SIGNED_URL
        assert 'Cannot access remote file' in str(exc_info.value)
        assert session.calls_to('GET', 'pic.png') == []
        assert list(temp_dir.iterdir()) == []

    def test_head_transport_error(self, resolver, session, temp_dir):
        session.add('HEAD', 'pic.png', requests.ConnectionError("unreachable"))

        with pytest.raises(MediaUploadError) as exc_info:
            resolver.resolve(REMOTE_URL)

        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    def test_failed_download_removes_temp_file(self, resolver, session, temp_dir):
        session.add('HEAD', 'pic.png', make_response(headers={}))
        session.add('GET', 'pic.png', make_response(status_code=500, headers={}))

        with pytest.raises(MediaUploadError) as exc_info:
            resolver.resolve(REMOTE_URL)

        assert 'Cannot download remote file' in str(exc_info.value)
        assert list(temp_dir.iterdir()) == []

    def test_download_transport_error_removes_temp_file(self, resolver, session, temp_dir):
        session.add('HEAD', 'pic.png', make_response(headers={}))
        session.add('GET', 'pic.png', requests.ReadTimeout("slow"))

        with pytest.raises(MediaUploadError):
            resolver.resolve(REMOTE_URL)

        assert list(temp_dir.iterdir()) == []

    def test_cancelled_download_removes_temp_file(self, resolver, session, temp_dir):
        response = make_response(headers={})
        response.iter_content.side_effect = KeyboardInterrupt
        session.add('HEAD', 'pic.png', make_response(headers={}))
        session.add('GET', 'pic.png', response)

        with pytest.raises(KeyboardInterrupt):
            resolver.resolve(REMOTE_URL)

        assert list(temp_dir.iterdir()) == []
        response.close.assert_called_once()

"""
Re-host a media file: stream it down from its source and straight back up to
the upload service as a multipart form, without holding the whole file.
"""
from __future__ import annotations

import logging
import mimetypes
import posixpath
from typing import Any, Iterable, Iterator, Optional
from urllib.parse import unquote, urlsplit

import requests
from urllib3.fields import RequestField
from urllib3.filepost import choose_boundary

from utils.security import redact_secrets

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
UPLOAD_FIELD = "files[]"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Older interpreters ship without a .webp mapping
mimetypes.add_type("image/webp", ".webp")


def filename_from_url(url: str) -> str:
    name = unquote(posixpath.basename(urlsplit(url).path))
    return name or "upload"


def guess_content_type(filename: str) -> str:
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or DEFAULT_CONTENT_TYPE


def multipart_stream(
    chunks: Iterable[bytes],
    *,
    filename: str,
    content_type: str,
    boundary: str,
    field_name: str = UPLOAD_FIELD,
) -> Iterator[bytes]:
    """Yield a single-file multipart/form-data body around ``chunks``."""
    part = RequestField(name=field_name, data=b"", filename=filename)
    part.make_multipart(content_type=content_type)
    yield f"--{boundary}\r\n".encode("latin-1")
    yield part.render_headers().encode("utf-8")
    for chunk in chunks:
        if chunk:
            yield chunk
    yield f"\r\n--{boundary}--\r\n".encode("latin-1")


def extract_upload_url(payload: Any) -> Optional[str]:
    """Return the first file URL of a successful upload response, else None."""
    if not isinstance(payload, dict) or not payload.get("success"):
        return None
    files = payload.get("files")
    if not isinstance(files, list) or not files:
        return None
    first = files[0]
    if not isinstance(first, dict):
        return None
    url = first.get("url")
    return url if isinstance(url, str) and url else None


class MediaRelay:
    def __init__(
        self,
        upload_url: str,
        request_timeout: int = 30,
        upload_timeout: int = 300,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.upload_url = upload_url
        self.request_timeout = request_timeout
        self.upload_timeout = upload_timeout
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers.update({"User-Agent": user_agent})

    def relay(self, media_url: str) -> Optional[str]:
        """Re-host ``media_url``; returns the new public URL or None."""
        logger.info("Attempting to download: %s", media_url)
        filename = filename_from_url(media_url)
        content_type = guess_content_type(filename)
        boundary = choose_boundary()
        try:
            with self.session.get(media_url, stream=True, timeout=self.request_timeout) as download:
                download.raise_for_status()
                body = multipart_stream(
                    download.iter_content(chunk_size=CHUNK_SIZE),
                    filename=filename,
                    content_type=content_type,
                    boundary=boundary,
                )
                logger.info("Uploading '%s' (from %s) to %s...", filename, media_url, self.upload_url)
                upload = self.session.post(
                    self.upload_url,
                    data=body,
                    headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
                    timeout=self.upload_timeout,
                )
            upload.raise_for_status()
            payload = upload.json()
        except requests.Timeout:
            logger.error("Timeout while relaying %s", media_url)
            return None
        except requests.JSONDecodeError as exc:
            logger.error("Upload service returned a non-JSON response for %s: %s", media_url, exc)
            return None
        except requests.RequestException as exc:
            logger.error("An error occurred during upload processing for %s: %s", media_url, redact_secrets(str(exc)))
            return None

        relay_url = extract_upload_url(payload)
        if not relay_url:
            logger.error("Upload failed for %s. Response: %s", media_url, redact_secrets(str(payload)[:500]))
            return None
        logger.info("Successfully uploaded %s to %s", media_url, relay_url)
        return relay_url

"""
Injected capabilities for third-party services: translation and image hosting.

The core logic only depends on the Translator and ImageStore protocols; the
HTTP implementations here talk to the public Google Translate endpoint and
to Cloudinary, and the memory implementation backs development and tests.
"""

import hashlib
import logging
import time
from typing import Protocol
from urllib.parse import urlparse
from uuid import uuid4

import httpx

from .errors import DependencyError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_FORMATS = ("jpg", "jpeg", "png", "gif")
PHOTO_FOLDER = "diary-photos"


class Translator(Protocol):
    async def translate(self, text: str, target: str) -> str: ...


class ImageStore(Protocol):
    async def upload(self, filename: str, data: bytes, content_type: str) -> str: ...

    async def delete(self, url: str) -> None: ...


def image_extension(filename: str) -> str:
    """
    Return the lower-cased extension of an image filename.

    Raises:
        ValidationError: If the extension is not an allowed image format
    """
    _, dot, ext = filename.rpartition(".")
    ext = ext.lower()
    if not dot or ext not in ALLOWED_IMAGE_FORMATS:
        raise ValidationError(
            f"Unsupported image type, allowed: {', '.join(ALLOWED_IMAGE_FORMATS)}"
        )
    return ext


def public_id_from_url(url: str, folder: str = PHOTO_FOLDER) -> str:
    """Derive the hosted asset id from its URL: last path segment, no extension."""
    name = urlparse(url).path.rsplit("/", 1)[-1]
    return f"{folder}/{name.split('.')[0]}"


# MARK: - Translation


class GoogleTranslator:
    """Translator backed by the public translate.googleapis.com endpoint."""

    URL = "https://translate.googleapis.com/translate_a/single"

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._transport = transport
        self._timeout = timeout

    async def translate(self, text: str, target: str) -> str:
        params = {"client": "gtx", "sl": "auto", "tl": target, "dt": "t", "q": text}
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self._timeout
            ) as client:
                response = await client.get(self.URL, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DependencyError(f"Translation failed: {e}")

        # Response is a nested array; the first element holds [translated, original, ...] segments
        segments = data[0] if isinstance(data, list) and data else None
        translated = "".join(
            segment[0]
            for segment in segments or []
            if isinstance(segment, list) and segment and segment[0]
        )
        if not translated:
            raise DependencyError("Translation failed: empty response")
        return translated


# MARK: - Image hosting


class CloudinaryImageStore:
    """
    Image store using Cloudinary's signed upload and destroy REST endpoints.

    Uploads land in the `diary-photos` folder and are limited to 800x600.
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = PHOTO_FOLDER,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = f"https://api.cloudinary.com/v1_1/{cloud_name}/image"
        self._api_key = api_key
        self._api_secret = api_secret
        self._folder = folder
        self._transport = transport
        self._timeout = timeout

    def _signed(self, params: dict[str, str]) -> dict[str, str]:
        params = {**params, "timestamp": str(int(time.time()))}
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        signature = hashlib.sha1(f"{to_sign}{self._api_secret}".encode("utf-8"))
        return {**params, "api_key": self._api_key, "signature": signature.hexdigest()}

    async def _post(self, action: str, data: dict[str, str], files=None) -> dict:
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self._timeout
            ) as client:
                response = await client.post(
                    f"{self._base_url}/{action}", data=data, files=files
                )
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DependencyError(f"Image host {action} failed: {e}")

    async def upload(self, filename: str, data: bytes, content_type: str) -> str:
        image_extension(filename)
        params = self._signed(
            {
                "folder": self._folder,
                "allowed_formats": ",".join(ALLOWED_IMAGE_FORMATS),
                "transformation": "c_limit,w_800,h_600",
            }
        )
        result = await self._post(
            "upload", params, files={"file": (filename, data, content_type)}
        )
        url = result.get("secure_url") or result.get("url")
        if not url:
            raise DependencyError("Image host upload failed: no URL returned")
        logger.info("Uploaded photo %s", url)
        return url

    async def delete(self, url: str) -> None:
        public_id = public_id_from_url(url, self._folder)
        result = await self._post("destroy", self._signed({"public_id": public_id}))
        if result.get("result") not in ("ok", "not found"):
            raise DependencyError(f"Image host destroy failed: {result}")
        logger.info("Deleted photo %s", public_id)


class MemoryImageStore:
    """In-process image store serving `memory://` URLs."""

    def __init__(self) -> None:
        self.images: dict[str, bytes] = {}

    async def upload(self, filename: str, data: bytes, content_type: str) -> str:
        ext = image_extension(filename)
        url = f"memory://{PHOTO_FOLDER}/{uuid4().hex}.{ext}"
        self.images[url] = data
        return url

    async def delete(self, url: str) -> None:
        self.images.pop(url, None)

"""
Tests for the HTTP-backed translation and image hosting capabilities.

The remote services are replaced with httpx.MockTransport handlers.
"""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from secreto_diary.capabilities import (
    CloudinaryImageStore,
    GoogleTranslator,
    MemoryImageStore,
    image_extension,
    public_id_from_url,
)
from secreto_diary.errors import DependencyError, ValidationError

HOSTED_URL = "https://res.cloudinary.com/demo/image/upload/v1712/diary-photos/abc123.jpg"


class TestGoogleTranslator:
    async def test_joins_segments(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            body = [[["Hola ", "Hello ", None], ["mundo", "world", None]], None, "en"]
            return httpx.Response(200, json=body)

        translator = GoogleTranslator(transport=httpx.MockTransport(handler))

        assert await translator.translate("Hello world", "es") == "Hola mundo"
        assert seen["tl"] == "es"
        assert seen["sl"] == "auto"
        assert seen["q"] == "Hello world"

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, text="oops"),
            httpx.Response(200, text="not json"),
            httpx.Response(200, json=[[], None, "en"]),
            httpx.Response(200, json=None),
        ],
    )
    async def test_failures_raise_dependency_error(self, response):
        translator = GoogleTranslator(transport=httpx.MockTransport(lambda r: response))
        with pytest.raises(DependencyError):
            await translator.translate("Hello", "es")


class TestCloudinaryImageStore:
    def setup_method(self):
        self.requests = []

    def _handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/image/upload"):
            return httpx.Response(200, json={"secure_url": HOSTED_URL})
        if request.url.path.endswith("/image/destroy"):
            return httpx.Response(200, json={"result": "ok"})
        return httpx.Response(404)

    def _store(self, handler=None) -> CloudinaryImageStore:
        return CloudinaryImageStore(
            "demo",
            "key",
            "secret",
            transport=httpx.MockTransport(handler or self._handler),
        )

    async def test_upload(self):
        url = await self._store().upload("cat.jpg", b"jpeg-bytes", "image/jpeg")

        assert url == HOSTED_URL
        request = self.requests[0]
        assert str(request.url) == "https://api.cloudinary.com/v1_1/demo/image/upload"
        assert b'name="signature"' in request.content
        assert b'name="folder"' in request.content
        assert b"jpeg-bytes" in request.content

    async def test_upload_rejects_non_images(self):
        with pytest.raises(ValidationError):
            await self._store().upload("notes.txt", b"hi", "text/plain")
        assert self.requests == []

    async def test_delete_signs_public_id(self):
        await self._store().delete(HOSTED_URL)

        form = parse_qs(self.requests[0].content.decode())
        assert form["public_id"] == ["diary-photos/abc123"]
        assert form["api_key"] == ["key"]
        assert len(form["signature"][0]) == 40

    async def test_delete_failure(self):
        def handler(request):
            return httpx.Response(200, json={"result": "error"})

        with pytest.raises(DependencyError):
            await self._store(handler).delete(HOSTED_URL)

    async def test_http_error(self):
        def handler(request):
            return httpx.Response(401, content=json.dumps({"error": "bad key"}))

        with pytest.raises(DependencyError):
            await self._store(handler).upload("cat.png", b"png", "image/png")


class TestMemoryImageStore:
    async def test_upload_and_delete(self):
        store = MemoryImageStore()

        url = await store.upload("Cat.PNG", b"png", "image/png")
        assert url.startswith("memory://diary-photos/")
        assert url.endswith(".png")
        assert store.images[url] == b"png"

        await store.delete(url)
        await store.delete(url)
        assert store.images == {}


def test_image_extension():
    assert image_extension("photo.JPEG") == "jpeg"
    for name in ("photo.bmp", "photo", "archive.tar.gz"):
        with pytest.raises(ValidationError):
            image_extension(name)


def test_public_id_from_url():
    assert public_id_from_url(HOSTED_URL) == "diary-photos/abc123"
    assert public_id_from_url("https://host/a/b/pic.final.png?x=1") == "diary-photos/pic"

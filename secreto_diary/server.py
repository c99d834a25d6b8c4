"""
FastAPI server for the Secreto Diary service.

This module implements the REST API: account registration and login,
owner-scoped CRUD on diary entries, photo upload, on-demand translation and
a keep-alive probe. Stores and third-party capabilities are injected through
`create_app` so tests can run the full HTTP stack in memory.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, File, Header, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from . import __version__
from .capabilities import (
    CloudinaryImageStore,
    GoogleTranslator,
    ImageStore,
    MemoryImageStore,
    Translator,
)
from .config import Settings, get_settings
from .errors import DependencyError, DiaryError, ValidationError
from .keepalive import KeepAlive
from .log import setup_logging
from .models import DiaryEntry, FilterSpec, Mood, User
from .security import TokenIssuer, bearer_token
from .service import AccountService, Clock, DiaryService, utc_now
from .store import EntryStore, UserStore

logger = logging.getLogger(__name__)


# API Request/Response Schemas
class RegisterRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    username: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class UserOut(BaseModel):
    id: str
    email: str
    username: str
    avatar_url: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            avatar_url=user.avatar_url,
        )


class AuthResponse(BaseModel):
    token: str
    user: UserOut


class EntryCreate(BaseModel):
    """Payload for new entries; entry_date defaults to today."""

    title: str | None = None
    content: str | None = None
    entry_date: date | None = None
    photos: list[str] = Field(default_factory=list)
    mood_emoji: str | None = None


class EntryUpdate(BaseModel):
    title: str | None = None
    content: str | None = None


class EntryOut(BaseModel):
    """Wire shape of a diary entry."""

    id: str
    title: str
    content: str
    entry_date: date
    photos: list[str]
    mood_emoji: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entry(cls, entry: DiaryEntry, **extra) -> "EntryOut":
        return cls(
            id=entry.id,
            title=entry.title,
            content=entry.content,
            entry_date=entry.entry_date,
            photos=list(entry.photos),
            mood_emoji=entry.mood.value if entry.mood else None,
            created_at=entry.created_at,
            updated_at=entry.updated_at or entry.created_at,
            **extra,
        )


class EntryDetail(EntryOut):
    user_id: str
    editable: bool


class TranslationOut(BaseModel):
    title: str
    content: str
    target: str


class MessageOut(BaseModel):
    success: bool = True
    message: str


def _default_image_store(settings: Settings) -> ImageStore:
    if settings.cloudinary_configured:
        return CloudinaryImageStore(
            settings.cloudinary_cloud_name,
            settings.cloudinary_api_key,
            settings.cloudinary_api_secret,
        )
    logger.warning("Cloudinary not configured, photos are kept in memory")
    return MemoryImageStore()


def create_app(
    entry_store: EntryStore | None = None,
    user_store: UserStore | None = None,
    image_store: ImageStore | None = None,
    translator: Translator | None = None,
    settings: Settings | None = None,
    clock: Clock = utc_now,
) -> FastAPI:
    """
    Create a FastAPI application wired to the given collaborators.

    Args:
        entry_store: Diary entry storage (fresh in-memory store by default)
        user_store: User storage (fresh in-memory store by default)
        image_store: Photo host (Cloudinary when configured, else memory)
        translator: Translation capability (Google Translate by default)
        settings: Application settings (read from the environment by default)
        clock: Source of the current time, used for timestamps and edit windows

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    entry_store = entry_store or EntryStore()
    user_store = user_store or UserStore()
    image_store = image_store or _default_image_store(settings)
    translator = translator or GoogleTranslator()

    diary = DiaryService(entry_store, image_store, clock=clock)
    accounts = AccountService(
        user_store,
        TokenIssuer(settings.jwt_secret, settings.jwt_expire_days),
        clock=clock,
    )

    keepalive = (
        KeepAlive(user_store.count, settings.keepalive_interval)
        if settings.keepalive_interval
        else None
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Start and stop the keep-alive task with the application."""
        if keepalive:
            keepalive.start()
        yield
        if keepalive:
            await keepalive.stop()

    app = FastAPI(
        title="Secreto Diary",
        description="A personal diary service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.diary = diary
    app.state.accounts = accounts
    app.state.keepalive = keepalive

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DiaryError)
    async def diary_error_handler(request: Request, exc: DiaryError) -> JSONResponse:
        if isinstance(exc, DependencyError):
            logger.exception(
                "%s %s: %s", request.method, request.url.path, exc.message, exc_info=exc
            )
            return JSONResponse(
                {"error": "A dependent service failed, please try again later"},
                status_code=exc.status_code,
            )
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        return JSONResponse({"error": details}, status_code=400)

    async def current_user(authorization: str | None = Header(None)) -> User:
        return await accounts.authenticate(bearer_token(authorization))

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "secreto-diary"}

    api = APIRouter(prefix="/api")

    @api.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "OK", "timestamp": clock().isoformat()}

    # MARK: - Accounts

    @api.post("/auth/register", status_code=201)
    async def register(payload: RegisterRequest) -> AuthResponse:
        token, user = await accounts.register(
            payload.email, payload.password, payload.username
        )
        return AuthResponse(token=token, user=UserOut.from_user(user))

    @api.post("/auth/login")
    async def login(payload: LoginRequest) -> AuthResponse:
        token, user = await accounts.login(payload.email, payload.password)
        return AuthResponse(token=token, user=UserOut.from_user(user))

    @api.get("/profile")
    async def profile(user: User = Depends(current_user)) -> UserOut:
        return UserOut.from_user(await accounts.profile(user.id))

    # MARK: - Entries

    @api.get("/entries")
    async def list_entries(
        q: str | None = None,
        mood: str | None = None,
        day: str | None = None,
        month: str | None = None,
        start: str | None = None,
        end: str | None = None,
        user: User = Depends(current_user),
    ) -> list[EntryOut]:
        """
        List the caller's entries, newest first.

        Any of the query parameters narrows the list through the entry filter:
        `q` (text), `mood`, and one date mode out of `day`, `month` or
        `start`/`end`.
        """
        spec = FilterSpec.parse(
            term=q, mood=mood, day=day, month=month, start=start, end=end
        )
        entries = await diary.list_entries(user.id, spec)
        return [EntryOut.from_entry(e) for e in entries]

    @api.get("/entries/{entry_id}")
    async def get_entry(entry_id: str, user: User = Depends(current_user)) -> EntryDetail:
        entry = await diary.get_entry(user.id, entry_id)
        return EntryDetail.from_entry(
            entry, user_id=entry.owner_id, editable=diary.is_editable(entry)
        )

    @api.post("/entries", status_code=201)
    async def create_entry(
        payload: EntryCreate, user: User = Depends(current_user)
    ) -> dict[str, str]:
        entry = await diary.create_entry(
            user.id,
            payload.title,
            payload.content,
            entry_date=payload.entry_date,
            photos=payload.photos,
            mood=Mood.parse(payload.mood_emoji) if payload.mood_emoji else None,
        )
        return {"id": entry.id, "message": "Entry created successfully"}

    @api.put("/entries/{entry_id}")
    async def update_entry(
        entry_id: str, payload: EntryUpdate, user: User = Depends(current_user)
    ) -> MessageOut:
        await diary.update_entry(user.id, entry_id, payload.title, payload.content)
        return MessageOut(message="Entry updated successfully")

    @api.delete("/entries/{entry_id}")
    async def delete_entry(entry_id: str, user: User = Depends(current_user)) -> MessageOut:
        await diary.delete_entry(user.id, entry_id)
        return MessageOut(message="Entry deleted successfully")

    @api.post("/entries/{entry_id}/translate")
    async def translate_entry(
        entry_id: str,
        target: str | None = None,
        user: User = Depends(current_user),
    ) -> TranslationOut:
        target = target or settings.translate_target
        title, content = await diary.translate_entry(
            user.id, entry_id, translator, target
        )
        return TranslationOut(title=title, content=content, target=target)

    # MARK: - Photos

    @api.post("/upload")
    async def upload_photo(
        photo: UploadFile | None = File(None), user: User = Depends(current_user)
    ) -> dict[str, str]:
        """
        Upload one image to the photo host and return its URL.

        Only image content types are accepted, up to `max_upload_bytes`.
        """
        if photo is None:
            raise ValidationError("No file uploaded")
        if not (photo.content_type or "").startswith("image/"):
            raise ValidationError("Only image uploads are allowed")

        data = await photo.read(settings.max_upload_bytes + 1)
        if len(data) > settings.max_upload_bytes:
            raise ValidationError(
                f"File too large, limit is {settings.max_upload_bytes} bytes"
            )

        url = await image_store.upload(
            photo.filename or "photo", data, photo.content_type or "image/jpeg"
        )
        return {"url": url, "message": "Photo uploaded successfully"}

    @api.get("/keep-alive")
    async def keep_alive(user: User = Depends(current_user)) -> dict[str, Any]:
        return {
            "status": "alive",
            "timestamp": clock().isoformat(),
            "user_count": await user_store.count(),
        }

    app.include_router(api)
    return app


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "secreto_diary.server:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

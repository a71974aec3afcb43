from typing import List, Union, Optional
from pathlib import Path
from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Canvas Shelf"
    APP_VERSION: str = "0.3.0"

    # Root directory for all Canvas Shelf data
    # Can be overridden with CANVAS_SHELF_ROOT_DIR environment variable
    ROOT_DIR: Path = Path.home() / ".canvas-shelf"

    # SQLAlchemy URL for the document store. Defaults to a SQLite file in meta_dir.
    DATABASE_URL: Optional[str] = None

    # Base URL clients use to reach this service; thumbnail URLs are built from it
    PUBLIC_BASE_URL: str = "http://127.0.0.1:8000"

    # BACKEND_CORS_ORIGINS is a JSON-formatted list of origins
    # e.g: '["http://localhost", "http://localhost:3000"]'
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Identity provider token verification
    AUTH_JWT_SECRET: str = "change-me"
    AUTH_JWT_ALGORITHMS: List[str] = ["HS256"]
    AUTH_JWT_AUDIENCE: Optional[str] = None
    AUTH_JWT_ISSUER: Optional[str] = None

    # Longest edge of stored thumbnails, in pixels
    THUMBNAIL_MAX_PX: int = 512

    # Editor client settings
    API_BASE_URL: str = "http://127.0.0.1:8000"
    AUTOSAVE_DELAY_S: float = 5.0

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(case_sensitive=True, env_prefix="CANVAS_SHELF_")

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    @property
    def meta_dir(self) -> Path:
        """Directory for metadata files (database)."""
        return self.ROOT_DIR / "meta"

    @property
    def database_path(self) -> Path:
        """Path to the default SQLite database."""
        return self.meta_dir / "canvas-shelf.db"

    @property
    def database_url(self) -> str:
        return self.DATABASE_URL or f"sqlite:///{self.database_path}"

    @property
    def thumbnails_dir(self) -> Path:
        """Directory holding rendered project previews."""
        return self.ROOT_DIR / "thumbnails"

    @property
    def thumbnails_url(self) -> str:
        return f"{self.PUBLIC_BASE_URL.rstrip('/')}/thumbnails"

    def ensure_dirs(self) -> None:
        """Create all required directories if they don't exist."""
        self.ROOT_DIR.mkdir(parents=True, exist_ok=True)
        self.meta_dir.mkdir(exist_ok=True)
        self.thumbnails_dir.mkdir(exist_ok=True)


settings = Settings()

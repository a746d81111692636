# app/config.py
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings

from app.services.search import DEFAULT_TEXT_EXTENSIONS


class Settings(BaseSettings):
    # Home directory every operation is confined to (created if absent)
    HOME_DIRECTORY: Path = Path.home()

    # None -> follow the platform (case-insensitive on Windows only)
    PATH_CASE_INSENSITIVE: Optional[bool] = None

    # Search
    SEARCH_TEXT_EXTENSIONS: str = ", ".join(DEFAULT_TEXT_EXTENSIONS)
    SEARCH_MAX_RESULTS: int = 100

    # Streaming copy buffer for uploads/downloads
    COPY_CHUNK_SIZE: int = 1024 * 1024

    # HTTP transport
    HTTP_HOST: str = "127.0.0.1"
    HTTP_PORT: int = 8080
    HTTP_ALLOWED_ORIGINS: str = "*"
    HTTP_ALLOW_NO_ORIGIN: bool = True            # allow non-browser clients
    MCP_HTTP_PATH: str = "/mcp"

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    def text_extensions(self) -> List[str]:
        exts = []
        for e in self.SEARCH_TEXT_EXTENSIONS.split(","):
            e = e.strip().lower()
            if e:
                exts.append(e if e.startswith(".") else "." + e)
        return exts

    def allowed_origins(self) -> List[str]:
        return [o.strip().lower() for o in self.HTTP_ALLOWED_ORIGINS.split(",") if o.strip()]

# app/di.py
from dataclasses import dataclass
from typing import Optional

from app.config import Settings
from app.services.filesystem import FileSystemService


@dataclass
class Container:
    settings: Settings
    fs_service: FileSystemService


def build_container(settings: Optional[Settings] = None) -> Container:
    s = settings or Settings()
    fs = FileSystemService(
        s.HOME_DIRECTORY,
        case_insensitive=s.PATH_CASE_INSENSITIVE,
        text_extensions=s.text_extensions(),
        chunk_size=s.COPY_CHUNK_SIZE,
    )
    return Container(s, fs)

"""
Поставщики исходного текста шаблонов.

Единственная граница ввода-вывода шаблонизатора: композитор получает
текст layout, страниц и partial только через TemplateSource.get_source().
"""

from __future__ import annotations

import logging
import posixpath
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """
    Приводит путь шаблона к каноническому виду: '/'-разделители, без
    ведущего '/', без '.' сегментов.

    Raises:
        ValueError: Если путь пустой или выходит за пределы корня
    """
    cleaned = path.replace("\\", "/").strip()
    if not cleaned:
        raise ValueError("Empty template path")
    norm = posixpath.normpath(cleaned.lstrip("/"))
    if not norm or norm == ".":
        raise ValueError(f"Invalid template path: {path!r}")
    if norm.startswith("../") or norm == "..":
        raise ValueError(f"Template path escapes root: {path!r}")
    return norm


@runtime_checkable
class TemplateSource(Protocol):
    """Поставщик сырого текста шаблонов по пути."""

    def get_source(self, path: str) -> Optional[str]:
        """Текст файла или None, если файла нет."""
        ...

    def list_files(self) -> List[str]:
        """Все доступные пути в каноническом виде."""
        ...


class MemorySource:
    """
    Виртуальная файловая система в памяти.

    Удобна для тестов и для шаблонов, сгенерированных на лету.
    """

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self._files: Dict[str, str] = {}
        self._lock = threading.Lock()
        for path, text in (files or {}).items():
            self.write_file(path, text)

    def write_file(self, path: str, text: str) -> None:
        with self._lock:
            self._files[normalize_path(path)] = text
        logger.debug("Wrote virtual file '%s' (%d chars)", path, len(text))

    def delete_file(self, path: str) -> bool:
        with self._lock:
            return self._files.pop(normalize_path(path), None) is not None

    def get_source(self, path: str) -> Optional[str]:
        with self._lock:
            return self._files.get(normalize_path(path))

    def list_files(self) -> List[str]:
        with self._lock:
            return sorted(self._files)


class FileSystemSource:
    """Файлы шаблонов в каталоге на диске (UTF-8)."""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        p = (self.root / normalize_path(path)).resolve()
        # Security: путь должен оставаться внутри корня
        try:
            p.relative_to(self.root)
        except ValueError:
            raise ValueError(f"Resolved path escapes template root: {p} not under {self.root}")
        return p

    def get_source(self, path: str) -> Optional[str]:
        p = self._resolve(path)
        if not p.is_file():
            return None
        return p.read_text(encoding="utf-8")

    def list_files(self) -> List[str]:
        if not self.root.is_dir():
            return []
        out: List[str] = []
        for p in self.root.rglob("*"):
            if p.is_file():
                out.append(p.relative_to(self.root).as_posix())
        out.sort()
        return out


__all__ = ["TemplateSource", "MemorySource", "FileSystemSource", "normalize_path"]

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from gpapredictor.config.settings import settings
from gpapredictor.services.export_service import ImportFormatError, export_json, import_json
from gpapredictor.state.course_book import CourseBook

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class BookStore(ABC):
    @abstractmethod
    def load(self) -> CourseBook:
        ...

    @abstractmethod
    def save(self, book: CourseBook) -> None:
        ...


class MemoryStore(BookStore):
    def __init__(self, book: CourseBook | None = None) -> None:
        self.book = book or CourseBook()
        self.saves = 0

    def load(self) -> CourseBook:
        return self.book

    def save(self, book: CourseBook) -> None:
        self.book = book
        self.saves += 1


class JsonFileStore(BookStore):
    def __init__(self, path: str = "data/gpa-predictor-data.json") -> None:
        self.path = Path(path)

    @classmethod
    def from_settings(cls) -> "JsonFileStore":
        return cls(settings.data_path)

    def load(self) -> CourseBook:
        if not self.path.exists():
            logger.info("No saved data at %s, starting with an empty course book", self.path)
            return CourseBook()
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not read {self.path}: {exc}") from exc
        try:
            book = import_json(text)
        except ImportFormatError as exc:
            raise StorageError(f"Saved data at {self.path} is not a course book") from exc
        logger.info("Loaded %d courses from %s", len(book.courses), self.path)
        return book

    def save(self, book: CourseBook) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(export_json(book), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not write {self.path}: {exc}") from exc
        logger.info("Saved %d courses to %s", len(book.courses), self.path)

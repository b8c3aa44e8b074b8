from __future__ import annotations

from typing import Callable, Optional

from gpapredictor.config.logging_config import configure_logging
from gpapredictor.services.storage import BookStore, JsonFileStore
from gpapredictor.state.course_book import CourseBook


class AppState:
    """Current course book plus the store it is saved to after every change."""

    def __init__(self, store: BookStore) -> None:
        self.store = store
        self.book: CourseBook = store.load()

    def apply(self, change: Callable[..., CourseBook], *args) -> CourseBook:
        book = change(self.book, *args)
        if book is not self.book:
            self.book = book
            self.store.save(book)
        return self.book

    def replace(self, book: CourseBook) -> CourseBook:
        self.book = book
        self.store.save(book)
        return book

    def tgpa(self, term: Optional[str] = None) -> Optional[float]:
        return self.book.tgpa(term)

    def cgpa(self) -> Optional[float]:
        return self.book.cgpa()


def load_app_state() -> AppState:
    configure_logging()
    return AppState(JsonFileStore.from_settings())

"""Book text parsing: noise cleanup and chapter splitting.

Input is plain text already extracted from a book (for example the output of
a PDF-to-text tool). Extraction itself happens outside this package.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import List
import structlog

from bookrag import config

logger = structlog.get_logger()

CHAPTER_PREFIXES = ("CHAPTER ", "Chapter ")
DEFAULT_CHAPTER_TITLE = "Chapter"


@dataclass
class Chapter:
    """A titled unit of book text handed to the chunker."""

    title: str
    content: str


def load_book(path: Path) -> str:
    """Read an extracted book as UTF-8 text.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Book not found: {path}")

    text = path.read_text(encoding="utf-8")
    logger.info("book_loaded", path=str(path), text_length=len(text))
    return text


def clean_text(text: str, min_line_chars: int = None) -> str:
    """Drop short lines (page numbers, running headers) and rejoin hyphenated words.

    Args:
        text: Raw extracted text
        min_line_chars: Lines of this length or shorter are dropped (default from config)

    Returns:
        Cleaned text
    """
    if min_line_chars is None:
        min_line_chars = config.MIN_LINE_CHARS

    lines = [line for line in text.splitlines() if len(line) > min_line_chars]
    return "\n".join(lines).replace("-\n", "")


def split_chapters(text: str) -> List[Chapter]:
    """Split text into chapters on lines starting with "CHAPTER " or "Chapter ".

    The heading line becomes the chapter title and is not part of the content.
    Text before the first heading forms a chapter titled "Chapter".
    """
    chapters: List[Chapter] = []
    title = DEFAULT_CHAPTER_TITLE
    current: List[str] = []

    for line in text.splitlines():
        if line.startswith(CHAPTER_PREFIXES):
            if current:
                chapters.append(Chapter(title=title, content="".join(current)))
                current = []
            title = line
        else:
            current.append(line + "\n")

    if current:
        chapters.append(Chapter(title=title, content="".join(current)))

    logger.info("chapters_split", chapter_count=len(chapters))
    return chapters

"""
Extraction output model.

Dependencies: pydantic
System role: Hand-off between the extraction and chunking stages
"""

from pydantic import BaseModel, Field

PAGE_SEPARATOR = "\n\n"


class ExtractedPage(BaseModel):
    """Text of one page; ``number`` is None for unpaginated sources."""

    number: int | None = Field(default=None, description="1-based page number")
    text: str = Field(description="Page text")


class ExtractedText(BaseModel):
    """
    Plain text of a document, split by page where the source has pages.

    ``full_text`` joins pages with a blank line; chunk offsets index into it.
    """

    pages: list[ExtractedPage] = Field(default_factory=list)
    paginated: bool = Field(default=False)
    used_ocr: bool = Field(default=False)

    @property
    def full_text(self) -> str:
        return PAGE_SEPARATOR.join(page.text for page in self.pages)

    def page_starts(self) -> list[int]:
        """Offset of each page inside ``full_text``."""
        starts: list[int] = []
        cursor = 0
        for page in self.pages:
            starts.append(cursor)
            cursor += len(page.text) + len(PAGE_SEPARATOR)
        return starts

    @property
    def is_empty(self) -> bool:
        return not any(page.text.strip() for page in self.pages)

"""
Text chunking task using RecursiveCharacterTextSplitter.

Splits extracted text into overlapping, token-bounded chunks. Splitting
prefers paragraph, then line, then sentence, then word boundaries and
falls back to hard cuts. Chunks never cross a page boundary.

Dependencies: langchain_text_splitters
System role: Second stage of document ingestion pipeline
"""

import math
import uuid

from langchain_text_splitters import RecursiveCharacterTextSplitter

from ragengine.core.document_processing.models import Chunk, ExtractedText

CHARS_PER_TOKEN = 4
SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


def estimate_tokens(text: str) -> int:
    """Rough token count (~4 characters per token)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def chunk_id(document_id: str, generation: int, ordinal: int) -> str:
    """Stable chunk id; a new ingestion generation yields new ids."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"ragengine:{document_id}:{generation}:{ordinal}"))


class ChunkingTask:
    """Split extracted documents into chunks."""

    def __init__(
        self,
        chunk_size_tokens: int = 400,
        chunk_overlap_tokens: int = 60,
    ) -> None:
        """
        Initialize chunking task with splitter configuration.

        Args:
            chunk_size_tokens: Target chunk length in estimated tokens
            chunk_overlap_tokens: Overlap between consecutive chunks

        Raises:
            ValueError: When overlap is not smaller than the chunk size
        """
        if chunk_overlap_tokens >= chunk_size_tokens:
            raise ValueError("chunk_overlap_tokens must be smaller than chunk_size_tokens")

        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size_tokens,
            chunk_overlap=chunk_overlap_tokens,
            length_function=estimate_tokens,
            separators=SEPARATORS,
            keep_separator=True,
            strip_whitespace=True,
        )

    def chunk(self, extracted: ExtractedText, document_id: str, generation: int = 0) -> list[Chunk]:
        """
        Split extracted text into chunks.

        Offsets index into ``extracted.full_text`` such that
        ``full_text[offset_start:offset_end] == chunk.text``. The trailing
        chunk is kept even when short.

        Args:
            extracted: Extraction output
            document_id: Owning document
            generation: Ingestion run counter used for chunk ids

        Returns:
            list[Chunk]: Chunks in document order, ordinals from 0
        """
        full_text = extracted.full_text
        chunks: list[Chunk] = []

        for page, page_start in zip(extracted.pages, extracted.page_starts()):
            cursor = 0
            for piece in self._splitter.split_text(page.text):
                local_start = page.text.find(piece, cursor)
                if local_start < 0:
                    local_start = page.text.find(piece)
                cursor = local_start + 1

                start = page_start + local_start
                end = start + len(piece)
                ordinal = len(chunks)
                chunks.append(
                    Chunk(
                        id=chunk_id(document_id, generation, ordinal),
                        document_id=document_id,
                        ordinal=ordinal,
                        offset_start=start,
                        offset_end=end,
                        text=piece,
                        source_label=self._source_label(extracted, page.number, full_text, start, piece),
                    )
                )

        return chunks

    @staticmethod
    def _source_label(extracted: ExtractedText, page_number: int | None, full_text: str, start: int, piece: str) -> str:
        if extracted.paginated and page_number is not None:
            return f"page {page_number}"
        first_line = full_text.count("\n", 0, start) + 1
        last_line = first_line + piece.count("\n")
        return f"lines {first_line}-{last_line}"

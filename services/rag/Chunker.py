"""Text chunker.

Normalizes raw item text (HTML, markdown, URLs) and splits it into
overlapping word windows. Window size and overlap come from RAG_CHUNK_SIZE
and RAG_CHUNK_OVERLAP.
"""

import re

from shared.exceptions.errors import ConfigurationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.chunk import Chunk, ChunkMetadata

DEFAULT_CHUNK_SIZE = 512    # words per chunk
DEFAULT_CHUNK_OVERLAP = 50  # words shared by consecutive chunks

_HTML_TAG_RE = re.compile(r"<[^>]*>")
_MD_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_MD_HEADER_RE = re.compile(r"^#+\s+", re.MULTILINE)
_CODE_FENCE_RE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE_RE = re.compile(r"`([^`]+)`")
_EMPHASIS_RE = re.compile(r"[*_~]")
_URL_RE = re.compile(r"https?://\S+")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Strip markup from a text and collapse its whitespace.

    Link text and inline code text are kept, code fences become a single space.

    Args:
        text (str): Raw text, possibly containing HTML or markdown.

    Returns:
        str: Plain text on a single line.
    """
    text = _HTML_TAG_RE.sub(" ", text)
    text = _MD_LINK_RE.sub(r"\1", text)
    text = _MD_HEADER_RE.sub("", text)
    text = _CODE_FENCE_RE.sub(" ", text)
    text = _INLINE_CODE_RE.sub(r"\1", text)
    text = _EMPHASIS_RE.sub("", text)
    text = _URL_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def make_chunk_id(source_item_id: str, origin: str, chunk_index: int) -> str:
    """Deterministic chunk id, e.g. "Component:default/payments-catalog-0"."""
    return f"{source_item_id}-{origin}-{chunk_index}"


class Chunker:
    """Splits item text into overlapping fixed-size word windows."""

    def __init__(self, helper_config: HelperConfig, chunk_size: int | None = None, chunk_overlap: int | None = None):
        self.logging = helper_config.get_logger()
        self.chunk_size = chunk_size if chunk_size is not None else helper_config.get_positive_int_val(
            "RAG_CHUNK_SIZE", default=DEFAULT_CHUNK_SIZE
        )
        self.chunk_overlap = chunk_overlap if chunk_overlap is not None else helper_config.get_number_val(
            "RAG_CHUNK_OVERLAP", default=DEFAULT_CHUNK_OVERLAP
        )
        self._validate()

    def _validate(self) -> None:
        """
        Raises:
            ConfigurationError: If the window does not advance (overlap >= size) or a value is invalid.
        """
        if not isinstance(self.chunk_size, int) or self.chunk_size <= 0:
            raise ConfigurationError(f"Chunk size must be a positive integer, got '{self.chunk_size}'.")
        if not isinstance(self.chunk_overlap, int) or self.chunk_overlap < 0:
            raise ConfigurationError(f"Chunk overlap must be a non-negative integer, got '{self.chunk_overlap}'.")
        if self.chunk_size - self.chunk_overlap <= 0:
            raise ConfigurationError(
                f"Chunk overlap ({self.chunk_overlap}) must be smaller than chunk size ({self.chunk_size})."
            )

    def chunk(self, text: str, source_item_id: str, source_item_name: str, origin: str) -> list[Chunk]:
        """Normalize a text and split it into chunks.

        Consecutive chunks share `chunk_overlap` words. The last window ends at
        the final word, so no chunk is fully contained in its predecessor.

        Args:
            text (str): Raw item text.
            source_item_id (str): Reference of the item the text belongs to.
            source_item_name (str): Display name of the item.
            origin (str): Where the text came from, e.g. "catalog" or "techdocs".

        Returns:
            list[Chunk]: Chunks in creation order, empty if the text has no content.
        """
        clean = normalize_text(text or "")
        if not clean:
            self.logging.warning("No content to chunk for item: %s", source_item_name)
            return []

        words = clean.split(" ")
        step = self.chunk_size - self.chunk_overlap

        # first pass: windows, total still unknown
        drafts: list[Chunk] = []
        start = 0
        while True:
            window = words[start:start + self.chunk_size]
            index = len(drafts)
            drafts.append(
                Chunk(
                    id=make_chunk_id(source_item_id, origin, index),
                    source_item_id=source_item_id,
                    source_item_name=source_item_name,
                    content=" ".join(window),
                    metadata=ChunkMetadata(origin=origin, chunk_index=index),
                )
            )
            if start + self.chunk_size >= len(words):
                break
            start += step

        # second pass: back-fill the final count
        total = len(drafts)
        chunks = [
            draft.model_copy(update={"metadata": draft.metadata.model_copy(update={"total_chunks": total})})
            for draft in drafts
        ]

        self.logging.info("Created %d chunks for %s (origin: %s)", total, source_item_name, origin)
        return chunks

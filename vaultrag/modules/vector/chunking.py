"""Line-aware markdown chunking."""

import re
from dataclasses import dataclass
from typing import List

_HEADING = re.compile(r"^#{1,6}\s")


@dataclass(frozen=True)
class TextChunk:
    """A contiguous excerpt of a document.

    Attributes:
        content: Chunk text
        start_line: First line of the excerpt (1-based, inclusive)
        end_line: Last line of the excerpt (1-based, inclusive)
    """

    content: str
    start_line: int
    end_line: int


class MarkdownChunker:
    """Splits markdown into bounded chunks that own whole lines.

    Lines are accumulated until the next one would push the chunk past
    ``chunk_size`` characters. A heading closes the current chunk early once it
    is at least half full, so chunks tend to follow section boundaries. A line
    longer than ``chunk_size`` becomes several chunks that all report that
    line's number.

    Without overlap, the line ranges of consecutive chunks are contiguous and
    cover every line of the document exactly once.
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 0):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be between 0 and chunk_size")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def split(self, text: str) -> List[TextChunk]:
        """Split ``text`` into chunks; empty text yields no chunks."""
        if not text or not text.strip():
            return []

        lines = text.split("\n")
        if text.endswith("\n"):
            lines.pop()

        chunks: List[TextChunk] = []
        current: List[str] = []
        current_start = 1
        current_length = 0

        def flush(end_line: int) -> None:
            nonlocal current, current_start, current_length
            if current:
                chunks.append(TextChunk("\n".join(current), current_start, end_line))
            current, current_length = self._carry_overlap(current)
            current_start = end_line + 1 - len(current)

        for line_number, line in enumerate(lines, start=1):
            if len(line) > self.chunk_size:
                flush(line_number - 1)
                current, current_length = [], 0
                chunks.extend(self._split_long_line(line, line_number))
                current_start = line_number + 1
                continue

            projected = current_length + len(line) + (1 if current else 0)
            starts_section = bool(_HEADING.match(line)) and current_length >= self.chunk_size / 2
            if current and (projected > self.chunk_size or starts_section):
                flush(line_number - 1)
                projected = current_length + len(line) + (1 if current else 0)
                if projected > self.chunk_size:
                    current, current_length = [], 0
                    current_start = line_number
                    projected = len(line)

            current.append(line)
            current_length = projected

        flush(len(lines))
        return chunks

    def _carry_overlap(self, lines: List[str]) -> tuple[List[str], int]:
        """Return the trailing lines of a flushed chunk to repeat in the next one."""
        if not self.chunk_overlap or not lines:
            return [], 0

        carried: List[str] = []
        length = 0
        for line in reversed(lines):
            added = len(line) + (1 if carried else 0)
            if length + added > self.chunk_overlap:
                break
            carried.insert(0, line)
            length += added
        return carried, length

    def _split_long_line(self, line: str, line_number: int) -> List[TextChunk]:
        step = self.chunk_size - self.chunk_overlap
        return [
            TextChunk(line[offset : offset + self.chunk_size], line_number, line_number)
            for offset in range(0, len(line), step)
        ]

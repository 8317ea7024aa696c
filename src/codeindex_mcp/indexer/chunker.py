"""Chunking logic for splitting source files at definition boundaries."""

import re
from collections.abc import Sequence

from codeindex_mcp.indexer.models import CodeChunk
from codeindex_mcp.indexer.tokens import compute_hash, extract_keywords

# Maximum lines per chunk before a boundary is forced
DEFAULT_MAX_CHUNK_LINES = 50

# Label length when a signature pattern has no capture group
SIGNATURE_LABEL_CHARS = 50

# Physical line terminators only, not form feeds or Unicode separators
_LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")


def match_signature(line: str, signatures: Sequence[re.Pattern[str]]) -> str | None:
    """
    Return the chunk label if the line starts a definition.

    The first capture group of the first matching pattern is the label. A
    pattern without a (matched) group labels the chunk with the start of the
    line instead.
    """
    for pattern in signatures:
        match = pattern.match(line)
        if match is None:
            continue
        if match.re.groups and match.group(1):
            return match.group(1)
        return line.strip()[:SIGNATURE_LABEL_CHARS]
    return None


def split_lines(content: str) -> list[str]:
    """Split content into physical lines, dropping the empty tail after a final newline."""
    lines = _LINE_BREAK_PATTERN.split(content)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def line_range_label(start_line: int, end_line: int) -> str:
    return f"lines {start_line}-{end_line}"


def _make_chunk(
    lines: list[str],
    start: int,
    end: int,
    label: str | None,
    file_path: str,
    relative_path: str,
) -> CodeChunk:
    """Build a chunk from lines[start:end] (0-based, end exclusive)."""
    content = "\n".join(lines[start:end])
    return CodeChunk(
        file_path=file_path,
        relative_path=relative_path,
        start_line=start + 1,
        end_line=end,
        signature=label if label is not None else line_range_label(start + 1, end),
        keywords=extract_keywords(content),
        content=content,
        content_hash=compute_hash(content),
    )


def window_chunks(
    lines: list[str],
    file_path: str,
    relative_path: str,
    max_lines: int,
) -> list[CodeChunk]:
    """Split lines into fixed windows of max_lines, labeled by line range."""
    return [
        _make_chunk(lines, start, min(start + max_lines, len(lines)), None, file_path, relative_path)
        for start in range(0, len(lines), max_lines)
    ]


def chunk_file(
    content: str,
    file_path: str,
    relative_path: str,
    signatures: Sequence[re.Pattern[str]],
    max_lines: int = DEFAULT_MAX_CHUNK_LINES,
) -> list[CodeChunk]:
    """
    Chunk a source file at definition signatures.

    Rules:
    1. A signature line closes the open chunk and opens a labeled one
    2. Other lines join the open chunk, opening an unlabeled one if needed
    3. A chunk reaching max_lines is closed on the spot
    4. If no signature matched anywhere, fall back to fixed windows

    The returned chunks are ordered and cover every line exactly once.
    """
    if max_lines < 1:
        raise ValueError(f"max_lines must be >= 1, got {max_lines}")

    lines = split_lines(content)
    chunks: list[CodeChunk] = []
    open_start: int | None = None
    open_label: str | None = None
    matched_any = False

    for i, line in enumerate(lines):
        label = match_signature(line, signatures)
        if label is not None:
            matched_any = True
            if open_start is not None:
                chunks.append(_make_chunk(lines, open_start, i, open_label, file_path, relative_path))
            open_start, open_label = i, label
            continue

        if open_start is None:
            open_start, open_label = i, None
        if i + 1 - open_start >= max_lines:
            chunks.append(_make_chunk(lines, open_start, i + 1, open_label, file_path, relative_path))
            open_start, open_label = None, None

    if open_start is not None:
        chunks.append(
            _make_chunk(lines, open_start, len(lines), open_label, file_path, relative_path)
        )

    if not matched_any:
        return window_chunks(lines, file_path, relative_path, max_lines)

    return chunks

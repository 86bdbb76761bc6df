"""
Detector for Dataview queries in markdown content.
"""

import re
from dataclasses import dataclass


@dataclass
class DataviewBlock:
    """A detected Dataview query block. Line numbers are 0-based."""

    query: str
    start_line: int
    end_line: int
    block_type: str  # "codeblock" or "inline"

    def __repr__(self) -> str:
        return f"DataviewBlock(type={self.block_type}, lines={self.start_line}-{self.end_line})"


class DataviewDetector:
    """Detects Dataview queries in markdown content."""

    # Regex patterns
    CODEBLOCK_START = re.compile(r"^\s*```dataview\s*$")
    FENCE = re.compile(r"^\s*```")
    INLINE_QUERY = re.compile(r"`=\s*(.+?)\s*`")

    @classmethod
    def detect_queries(cls, content: str) -> list[DataviewBlock]:
        """
        Detect all Dataview queries in markdown content.

        Codeblocks come first, then inline queries, each in document order.
        An unclosed ```dataview block is ignored.

        Returns:
            List of DataviewBlock objects containing query text and location.
        """
        lines = content.split("\n")
        return cls._detect_codeblocks(lines) + cls._detect_inline_queries(lines)

    @classmethod
    def _detect_codeblocks(cls, lines: list[str]) -> list[DataviewBlock]:
        """Detect ```dataview codeblocks."""
        blocks = []
        i = 0

        while i < len(lines):
            if cls.CODEBLOCK_START.match(lines[i]):
                start_line = i
                query_lines = []
                i += 1

                # Collect query lines until we hit the closing ```
                while i < len(lines):
                    if cls.FENCE.match(lines[i]):
                        blocks.append(
                            DataviewBlock(
                                query="\n".join(query_lines),
                                start_line=start_line,
                                end_line=i,
                                block_type="codeblock",
                            )
                        )
                        break
                    query_lines.append(lines[i].rstrip("\r"))
                    i += 1

            i += 1

        return blocks

    @classmethod
    def _detect_inline_queries(cls, lines: list[str]) -> list[DataviewBlock]:
        """Detect inline `= ...` queries outside of fenced code."""
        blocks = []
        in_fence = False

        for line_num, line in enumerate(lines):
            if cls.FENCE.match(line):
                in_fence = not in_fence
                continue
            if in_fence:
                continue

            for match in cls.INLINE_QUERY.finditer(line):
                blocks.append(
                    DataviewBlock(
                        query=match.group(1),
                        start_line=line_num,
                        end_line=line_num,
                        block_type="inline",
                    )
                )

        return blocks

    @classmethod
    def has_dataview_queries(cls, content: str) -> bool:
        """Check if content contains any Dataview queries."""
        return bool(cls.detect_queries(content))

    @classmethod
    def extract_query_text(cls, content: str) -> list[str]:
        """Extract just the query text from all detected queries."""
        return [block.query for block in cls.detect_queries(content)]

"""Lexical complexity estimate for Kotlin sources.

Used only when no complexity report covers a file. The estimate works on
tokens after comments and string literals are blanked out; it does not
parse the language.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

FUNCTION_RE = re.compile(r"\bfun\b")
DECISION_RE = re.compile(r"\bif\b|\bfor\b|\bwhile\b|\bwhen\b|\bcatch\b|&&|\|\||\?:")

SUPPORTED_SUFFIXES = (".kt",)


@dataclass(frozen=True)
class SourceComplexity:
    ncss: int
    max_ccn: int


def _blank(text: str) -> str:
    return "".join("\n" if c == "\n" else " " for c in text)


def strip_comments_and_strings(source: str) -> str:
    """Replace comments and string/char literals with spaces.

    Comments and triple-quoted strings keep their newlines. A single-line
    literal left unterminated swallows the rest of the file, newlines included.

    Block comments nest. Escapes inside string and char literals are honoured;
    triple-quoted strings have none.
    """
    out: List[str] = []
    i = 0
    n = len(source)

    while i < n:
        c = source[i]
        pair = source[i : i + 2]

        if pair == "//":
            end = source.find("\n", i)
            end = n if end == -1 else end
            out.append(_blank(source[i:end]))
            i = end
        elif pair == "/*":
            depth = 0
            j = i
            while j < n:
                if source.startswith("/*", j):
                    depth += 1
                    j += 2
                elif source.startswith("*/", j):
                    depth -= 1
                    j += 2
                    if depth == 0:
                        break
                else:
                    j += 1
            out.append(_blank(source[i:j]))
            i = j
        elif source.startswith('"""', i):
            end = source.find('"""', i + 3)
            end = n if end == -1 else end + 3
            out.append(_blank(source[i:end]))
            i = end
        elif c in ('"', "'"):
            j = i + 1
            while j < n:
                if source[j] == "\\" and j + 1 < n:
                    j += 2
                    continue
                j += 1
                if source[j - 1] == c:
                    break
            out.append(" " * (j - i))
            i = j
        else:
            out.append(c)
            i += 1

    return "".join(out)


def count_ncss(stripped: str) -> int:
    return sum(1 for line in stripped.splitlines() if line.strip())


def max_function_ccn(stripped: str) -> int:
    """Highest ``1 + decisions`` over the spans between ``fun`` keywords."""
    starts = [m.start() for m in FUNCTION_RE.finditer(stripped)]
    if not starts:
        return 1
    ends = starts[1:] + [len(stripped)]
    return max(
        1 + len(DECISION_RE.findall(stripped, start, end)) for start, end in zip(starts, ends)
    )


class LexicalComplexityAnalyzer:
    def analyze_text(self, source: str) -> SourceComplexity:
        stripped = strip_comments_and_strings(source)
        return SourceComplexity(
            ncss=max(count_ncss(stripped), 1), max_ccn=max(max_function_ccn(stripped), 1)
        )

    def analyze(self, path: Path) -> Optional[SourceComplexity]:
        """Estimate a file, or ``None`` for missing files and unsupported languages."""
        path = Path(path)
        if path.suffix.lower() not in SUPPORTED_SUFFIXES or not path.is_file():
            return None
        return self.analyze_text(path.read_text(encoding="utf-8", errors="replace"))

"""Models for reconstructed template source."""

from pydantic import BaseModel, Field

COMMENT_TOKEN_TYPES = frozenset({"comment", "linecomment"})


class Token(BaseModel):
    """A raw lexer token."""

    model_config = {"frozen": True}

    lineno: int = Field(ge=1, description="Line the token starts on (1-indexed)")
    type: str = Field(description="Lexer token type (name, data, block_begin, comment, ...)")
    value: str = Field(description="Literal text of the token")

    @property
    def is_comment(self) -> bool:
        return self.type in COMMENT_TOKEN_TYPES


class SourceIndex(BaseModel):
    """Per-line reconstruction of a document's source text.

    Each line maps to the token literals found on it, in encounter order.
    Pieces keep their line breaks, so joining every piece of every line
    reproduces the indexed text.
    """

    lines: dict[int, list[str]] = Field(
        default_factory=dict, description="Token literals keyed by 1-indexed line number"
    )
    comments: list[Token] = Field(
        default_factory=list, description="Comment tokens in encounter order"
    )

    @property
    def first_line(self) -> int | None:
        return min(self.lines) if self.lines else None

    @property
    def last_line(self) -> int | None:
        return max(self.lines) if self.lines else None

    def has_line(self, lineno: int | None) -> bool:
        return lineno is not None and lineno in self.lines

    def tokens(self, lineno: int) -> list[str]:
        """Return the token literals recorded for a line."""
        return list(self.lines.get(lineno, []))

    def line(self, lineno: int) -> str | None:
        """Return the text of a line without its trailing line break."""
        if lineno not in self.lines:
            return None
        text = "".join(self.lines[lineno])
        return text[:-1] if text.endswith("\n") else text

    def text(self) -> str:
        """Return the full indexed text, lines joined in order."""
        return "".join("".join(self.lines[lineno]) for lineno in sorted(self.lines))

    def surrounding(self, lineno: int, count: int) -> str:
        """Return the lines from ``count`` before to ``count`` after ``lineno``.

        Lines missing from the index are skipped. No whitespace is trimmed.
        """
        if count < 0:
            raise ValueError("count must be non-negative")
        selected = [
            self.line(n)
            for n in range(lineno - count, lineno + count + 1)
            if n in self.lines
        ]
        return "\n".join(line for line in selected if line is not None)

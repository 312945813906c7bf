"""Reconstruction of template source text from a second token pass.

The primary parse may still be running when a lint block is indexed, so the
source is retokenized from scratch with the environment's lexer settings.
``Lexer.tokeniter`` is a plain generator over the text and shares no cursor
with any parser.
"""

import logging
from collections.abc import Iterable, Sequence

from jinja2 import Environment

from templint.models.source import SourceIndex, Token

logger = logging.getLogger(__name__)

_TAG_BEGIN_TYPES = frozenset({"block_begin", "linestatement_begin"})
_TAG_END_TYPES = frozenset({"block_end", "linestatement_end"})
_SKIPPED_IN_TAG = frozenset({"whitespace"})


def tokenize(
    environment: Environment,
    source: str,
    name: str | None = None,
    filename: str | None = None,
) -> list[Token]:
    """Tokenize source with the environment's delimiters and whitespace options.

    Whitespace and comment tokens are kept so the text can be rebuilt.
    """
    return [
        Token(lineno=lineno, type=token_type, value=value)
        for lineno, token_type, value in environment.lexer.tokeniter(source, name, filename)
    ]


def _tag_name(tokens: Sequence[Token], start: int) -> str | None:
    """Return the first name inside the tag opened at ``start``."""
    for token in tokens[start + 1 :]:
        if token.type in _SKIPPED_IN_TAG:
            continue
        return token.value if token.type == "name" else None
    return None


def _tag_end(tokens: Sequence[Token], start: int) -> int:
    for position in range(start + 1, len(tokens)):
        if tokens[position].type in _TAG_END_TYPES:
            return position
    return len(tokens) - 1


def extract_block(
    tokens: Sequence[Token],
    ordinal: int = 0,
    begin_tag: str = "lint",
    end_tag: str = "endlint",
) -> list[Token]:
    """Return the tokens between an opening tag and its matching closing tag.

    The opening tag is the ``ordinal``-th (0-based) ``begin_tag`` in token
    order, counting nested ones, which is the order the parser meets them.
    Neither tag is part of the result. Nested blocks of the same tag are
    balanced.
    """
    opening = None
    seen = 0
    for position, token in enumerate(tokens):
        if token.type in _TAG_BEGIN_TYPES and _tag_name(tokens, position) == begin_tag:
            if seen == ordinal:
                opening = position
                break
            seen += 1
    if opening is None:
        logger.warning("No '%s' tag number %d in the template", begin_tag, ordinal)
        return []

    content_start = _tag_end(tokens, opening) + 1
    depth = 1
    for position in range(content_start, len(tokens)):
        if tokens[position].type not in _TAG_BEGIN_TYPES:
            continue
        tag = _tag_name(tokens, position)
        if tag == begin_tag:
            depth += 1
        elif tag == end_tag:
            depth -= 1
            if depth == 0:
                return list(tokens[content_start:position])

    logger.warning(
        "No matching '%s' tag for '%s' on line %d", end_tag, begin_tag, tokens[opening].lineno
    )
    return list(tokens[content_start:])


def _split_lines(value: str) -> list[str]:
    # the lexer normalizes every line break to "\n"
    parts = value.split("\n")
    pieces = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        pieces.append(parts[-1])
    return pieces


def build_source_index(tokens: Iterable[Token]) -> SourceIndex:
    """Index token literals by line number.

    A token spanning several lines contributes one piece to each of its
    lines, each piece keeping its line break.
    """
    index = SourceIndex()
    for token in tokens:
        if token.is_comment:
            index.comments.append(token)
        for offset, piece in enumerate(_split_lines(token.value)):
            index.lines.setdefault(token.lineno + offset, []).append(piece)
    return index


def index_source(
    environment: Environment,
    source: str,
    name: str | None = None,
    filename: str | None = None,
    block_index: int | None = None,
) -> SourceIndex:
    """Build the source index of a whole template, or of one lint block in it.

    ``block_index`` selects the lint block by its position among the lint
    tags of the template, so several blocks on one line and tags split over
    lines resolve to the right tokens.
    """
    tokens = tokenize(environment, source, name, filename)
    if block_index is not None:
        tokens = extract_block(tokens, block_index)
    return build_source_index(tokens)

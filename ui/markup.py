"""Inline markup for chat messages: tokenizer and HTML renderer.

Supported markers: ``**bold**``, ``*italic*``, ```code```, and newlines.
Markers do not nest; whatever sits between a pair is emitted as plain text
inside that one token. An unmatched marker is kept as literal text.
"""

import html
from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    """Kind of inline token."""

    TEXT = "text"
    BOLD = "bold"
    ITALIC = "italic"
    CODE = "code"
    LINE_BREAK = "line_break"


@dataclass(frozen=True)
class Token:
    """Single inline token."""

    kind: TokenKind
    text: str = ""


# Characters allowed right before an opening or right after a closing italic marker
ITALIC_BOUNDARY = frozenset(" \t\n.,;:!?-")

HTML_TAGS = {
    TokenKind.BOLD: "strong",
    TokenKind.ITALIC: "em",
    TokenKind.CODE: "code",
}


def _opens_italic(source: str, index: int) -> bool:
    if index > 0 and source[index - 1] not in ITALIC_BOUNDARY:
        return False
    following = source[index + 1 : index + 2]
    return bool(following) and not following.isspace() and following != "*"


def _find_italic_close(source: str, start: int) -> int:
    """Return the index of the closing ``*`` or -1."""
    for index in range(start, len(source)):
        char = source[index]
        if char == "\n":
            return -1
        if char == "*":
            after = source[index + 1 : index + 2]
            if not after or after in ITALIC_BOUNDARY:
                return index
            return -1
    return -1


def _find_pair_close(source: str, marker: str, start: int) -> int:
    """Return the index of the closing ``marker`` on the same line, or -1."""
    end = source.find(marker, start)
    if end <= start or "\n" in source[start:end]:
        return -1
    return end


def tokenize(source: str) -> list[Token]:
    """Split text into a flat stream of inline tokens.

    Args:
        source: Raw message text

    Returns:
        Tokens in source order; adjacent plain characters are merged
    """
    tokens: list[Token] = []
    buffer: list[str] = []

    def flush() -> None:
        if buffer:
            tokens.append(Token(TokenKind.TEXT, "".join(buffer)))
            buffer.clear()

    index = 0
    while index < len(source):
        char = source[index]

        if char == "\n":
            flush()
            tokens.append(Token(TokenKind.LINE_BREAK))
            index += 1
            continue

        if char == "`":
            end = _find_pair_close(source, "`", index + 1)
            if end != -1:
                flush()
                tokens.append(Token(TokenKind.CODE, source[index + 1 : end]))
                index = end + 1
                continue
        elif source.startswith("**", index):
            end = _find_pair_close(source, "**", index + 2)
            if end != -1:
                flush()
                tokens.append(Token(TokenKind.BOLD, source[index + 2 : end]))
                index = end + 2
                continue
            # Unmatched pair: keep both asterisks literal
            buffer.append("**")
            index += 2
            continue
        elif char == "*" and _opens_italic(source, index):
            end = _find_italic_close(source, index + 1)
            if end != -1:
                flush()
                tokens.append(Token(TokenKind.ITALIC, source[index + 1 : end]))
                index = end + 1
                continue

        buffer.append(char)
        index += 1

    flush()
    return tokens


def render_html(tokens: list[Token]) -> str:
    """Render tokens to HTML, escaping all text."""
    parts: list[str] = []
    for token in tokens:
        if token.kind is TokenKind.LINE_BREAK:
            parts.append("<br />")
        elif token.kind is TokenKind.TEXT:
            parts.append(html.escape(token.text))
        else:
            tag = HTML_TAGS[token.kind]
            parts.append(f"<{tag}>{html.escape(token.text)}</{tag}>")
    return "".join(parts)


def render_rich_text(text: str) -> str:
    """Tokenize and render message text in one step."""
    if not text:
        return ""
    return render_html(tokenize(text))

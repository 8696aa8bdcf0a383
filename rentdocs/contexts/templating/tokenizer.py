"""
Single-pass template tokenizer.

Splits template markup into a typed token stream so resolution never re-scans
text it has already produced. Tag syntax:

    {{name}}                 placeholder
    {{#if name}}             conditional open
    {{#else}}                conditional else
    {{/if}}                  conditional close

A tag is "{{", one or more characters other than braces, then "}}". Placeholder
names are letters, digits, "_" and "-". A complete tag that is neither a
placeholder nor one of the three directives (e.g. "{{tenant.name}}" or
"{{#each items}}") is an UNKNOWN token; the resolver empties it. Text that never
closes, such as a stray "{{", stays literal.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

TAG_OPEN = "{{"
TAG_CLOSE = "}}"

IF_OPEN_PATTERN = re.compile(r"^#if\s+([A-Za-z0-9_]+)\s*$")
ELSE_PATTERN = re.compile(r"^#else\s*$")
IF_CLOSE_PATTERN = re.compile(r"^/if\s*$")
PLACEHOLDER_PATTERN = re.compile(r"^\s*([A-Za-z0-9_-]+)\s*$")


class TokenType(Enum):
    LITERAL = "literal"
    PLACEHOLDER = "placeholder"
    IF_OPEN = "if_open"
    ELSE = "else"
    IF_CLOSE = "if_close"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Token:
    """
    One lexical unit of a template.

    Attributes:
        type: Token category
        text: Exact source text (used for pass-through)
        name: Placeholder or predicate name (None for literals, else and close)
    """

    type: TokenType
    text: str
    name: Optional[str] = None

    @property
    def is_directive(self) -> bool:
        return self.type in (TokenType.IF_OPEN, TokenType.ELSE, TokenType.IF_CLOSE)


def _classify(inner: str, raw: str) -> Token:
    """Turn the inside of a complete {{...}} tag into a token."""
    match = IF_OPEN_PATTERN.match(inner)
    if match:
        return Token(TokenType.IF_OPEN, raw, match.group(1))
    if ELSE_PATTERN.match(inner):
        return Token(TokenType.ELSE, raw)
    if IF_CLOSE_PATTERN.match(inner):
        return Token(TokenType.IF_CLOSE, raw)
    match = PLACEHOLDER_PATTERN.match(inner)
    if match:
        return Token(TokenType.PLACEHOLDER, raw, match.group(1))
    # Unknown directive or non-identifier name
    return Token(TokenType.UNKNOWN, raw)


def tokenize(markup: str) -> List[Token]:
    """
    Tokenize template markup in one left-to-right pass.

    Args:
        markup: Raw template text

    Returns:
        List of tokens whose texts concatenate back to `markup`

    Example:
        >>> [t.type.value for t in tokenize("Hi {{name}}!")]
        ['literal', 'placeholder', 'literal']
    """
    tokens: List[Token] = []
    literal_start = 0
    pos = 0
    length = len(markup)

    while pos < length:
        open_at = markup.find(TAG_OPEN, pos)
        if open_at == -1:
            break

        inner_start = open_at + len(TAG_OPEN)
        close_brace = markup.find("}", inner_start)

        is_tag = (
            close_brace > inner_start
            and markup.startswith(TAG_CLOSE, close_brace)
            and "{" not in markup[inner_start:close_brace]
        )
        if not is_tag:
            # Not a tag at this position; retry one character later
            pos = open_at + 1
            continue

        if open_at > literal_start:
            tokens.append(Token(TokenType.LITERAL, markup[literal_start:open_at]))

        tag_end = close_brace + len(TAG_CLOSE)
        raw = markup[open_at:tag_end]
        tokens.append(_classify(markup[inner_start:close_brace], raw))

        literal_start = tag_end
        pos = tag_end

    if literal_start < length:
        tokens.append(Token(TokenType.LITERAL, markup[literal_start:]))

    return tokens


def render_tokens(tokens: Iterable[Token]) -> str:
    """Concatenate token source texts."""
    return "".join(token.text for token in tokens)

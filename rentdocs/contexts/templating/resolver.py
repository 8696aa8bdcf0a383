"""
Placeholder Resolver

Resolves a template against a layered context and a predicate map. Works on the
typed token stream from the tokenizer, in fixed order:

1. Conditional pass: each {{#if name}}...{{/if}} block is replaced by the branch
   its predicate selects (unknown predicates are false). Runs once, before any
   substitution, and never resolves inside a discarded branch.
2. Layered substitution: each placeholder takes the value from the topmost layer
   that defines it. Values are inserted as literal text and never re-scanned.
3. Fallback: placeholders no layer defines become the empty string, and so does
   every other complete {{...}} tag left over (unknown directives, non-identifier
   names, {{#else}} or {{/if}} outside a block, {{#if}} inside a branch).
4. Optional-asset cleanup: when a configured asset token (e.g. a logo) resolves
   empty, the <img> tag that references it is removed instead of left broken.

An unterminated {{#if}} is not an error: its opening tag is kept verbatim and
everything after it resolves as ordinary text.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Set

from rentdocs.contexts.templating.logger import log_resolution_result
from rentdocs.contexts.templating.resolution_context import ResolutionContext
from rentdocs.contexts.templating.tokenizer import Token, TokenType, tokenize

# Asset tokens whose empty value removes the enclosing image tag
DEFAULT_OPTIONAL_ASSETS = ("logoBase64", "officeLogoBase64", "orgLogoBase64")

# Unfinished <img ... before the token and the rest of that tag after it
_IMG_TAG_HEAD = re.compile(r"<img\b[^<>]*$", re.IGNORECASE)
_IMG_TAG_TAIL = re.compile(r"^[^<>]*?/?>")


@dataclass
class ResolutionResult:
    """
    Outcome of resolving one template.

    Attributes:
        text: Resolved markup
        unresolved: Placeholder names no layer defined (emptied by the fallback)
        malformed_conditionals: Predicate names of unterminated {{#if}} blocks
        stripped_assets: Optional asset tokens whose image tags were removed
        discarded_tags: Leftover tags emptied by the fallback (raw text)
        selected_branches: Predicate name -> branch taken ("if", "else" or "none")
    """

    text: str
    unresolved: Set[str] = field(default_factory=set)
    malformed_conditionals: List[str] = field(default_factory=list)
    stripped_assets: List[str] = field(default_factory=list)
    selected_branches: Dict[str, str] = field(default_factory=dict)
    discarded_tags: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.unresolved or self.malformed_conditionals or self.discarded_tags)


def _find_close(tokens: Sequence[Token], start: int) -> int:
    """Index of the first {{/if}} at or after `start`, or -1."""
    for index in range(start, len(tokens)):
        if tokens[index].type is TokenType.IF_CLOSE:
            return index
    return -1


def _as_literal(token: Token) -> Token:
    return Token(TokenType.LITERAL, token.text)


def _discard(token: Token, result: Optional["ResolutionResult"]) -> None:
    if result is not None:
        result.discarded_tags.append(token.text)


def apply_conditionals(
    tokens: Sequence[Token],
    predicates: Mapping[str, bool],
    result: Optional[ResolutionResult] = None,
) -> List[Token]:
    """
    Replace every conditional block with its selected branch.

    Blocks do not nest: the first {{/if}} after an {{#if}} closes it. Any other
    directive, inside a branch or outside every block, is dropped. The opening
    tag of an unterminated block is kept as literal text.

    Args:
        tokens: Token stream from tokenize()
        predicates: Predicate name -> truth value
        result: Optional report to record branch choices and malformed blocks

    Returns:
        New token stream without conditional structure
    """
    output: List[Token] = []
    index = 0

    while index < len(tokens):
        token = tokens[index]

        if token.type is TokenType.IF_OPEN:
            close = _find_close(tokens, index + 1)
            if close == -1:
                # Unterminated: leave the opening tag as text and carry on
                if result is not None:
                    result.malformed_conditionals.append(token.name)
                output.append(_as_literal(token))
                index += 1
                continue

            body = tokens[index + 1 : close]
            else_at = next(
                (i for i, t in enumerate(body) if t.type is TokenType.ELSE), None
            )
            if else_at is None:
                if_branch, else_branch = body, []
            else:
                if_branch, else_branch = body[:else_at], body[else_at + 1 :]

            chosen = bool(predicates.get(token.name, False))
            branch = if_branch if chosen else else_branch
            if result is not None:
                if chosen:
                    taken = "if"
                else:
                    taken = "else" if else_at is not None else "none"
                result.selected_branches[token.name] = taken

            for inner in branch:
                if inner.is_directive:
                    _discard(inner, result)
                else:
                    output.append(inner)
            index = close + 1
            continue

        if token.is_directive:
            _discard(token, result)
        else:
            output.append(token)
        index += 1

    return output


class PlaceholderResolver:
    """
    Parametrized resolver shared by every document kind.

    Args:
        optional_assets: Placeholder names whose empty value removes the <img>
            tag that references them (defaults to the logo tokens)

    Example:
        >>> resolver = PlaceholderResolver()
        >>> context = ResolutionContext.from_mapping({"name": "Acme"})
        >>> resolver.resolve("Hello {{name}}", context)
        'Hello Acme'
    """

    def __init__(self, optional_assets: Sequence[str] = DEFAULT_OPTIONAL_ASSETS):
        self.optional_assets = frozenset(optional_assets)

    def resolve(
        self,
        template: str,
        context: ResolutionContext,
        predicates: Optional[Mapping[str, bool]] = None,
    ) -> str:
        """Resolve `template` and return the resulting markup."""
        return self.resolve_with_report(template, context, predicates).text

    def resolve_with_report(
        self,
        template: str,
        context: ResolutionContext,
        predicates: Optional[Mapping[str, bool]] = None,
        template_name: Optional[str] = None,
    ) -> ResolutionResult:
        """
        Resolve `template` and report degradations.

        Args:
            template: Raw template markup
            context: Layered placeholder values
            predicates: Predicate name -> truth value for conditional blocks
            template_name: When given, degradations are logged under this name

        Returns:
            ResolutionResult with resolved text and degradation details
        """
        result = ResolutionResult(text="")
        tokens = apply_conditionals(tokenize(template), predicates or {}, result)
        values = context.merged()

        pieces: List[str] = []
        for index, token in enumerate(tokens):
            if token.type is TokenType.UNKNOWN:
                _discard(token, result)
                continue
            if token.type is not TokenType.PLACEHOLDER:
                pieces.append(token.text)
                continue

            value = values.get(token.name)
            if value is None:
                result.unresolved.add(token.name)
                value = ""

            if not value and token.name in self.optional_assets:
                if self._strip_image_tag(pieces, tokens, index):
                    result.stripped_assets.append(token.name)
                    continue

            pieces.append(value)

        result.text = "".join(pieces)
        if template_name is not None:
            log_resolution_result(template_name, result)
        return result

    @staticmethod
    def _strip_image_tag(pieces: List[str], tokens: Sequence[Token], index: int) -> bool:
        """
        Remove the <img ...> tag around tokens[index], if there is one.

        Trims the unfinished tag head from the output so far and the tag tail
        from the next literal token. Returns False, touching nothing, when the
        token is not inside an image tag.
        """
        if not pieces or index + 1 >= len(tokens):
            return False
        following = tokens[index + 1]
        if following.type is not TokenType.LITERAL:
            return False

        head = _IMG_TAG_HEAD.search(pieces[-1])
        tail = _IMG_TAG_TAIL.match(following.text)
        if head is None or tail is None:
            return False

        pieces[-1] = pieces[-1][: head.start()]
        # Replace the following literal in place so the main loop emits the remainder
        tokens[index + 1] = Token(TokenType.LITERAL, following.text[tail.end() :])
        return True


_default_resolver = PlaceholderResolver()


def resolve(
    template: str,
    context: ResolutionContext,
    predicates: Optional[Mapping[str, bool]] = None,
) -> str:
    """Resolve with the default resolver (logo tokens as optional assets)."""
    return _default_resolver.resolve(template, context, predicates)

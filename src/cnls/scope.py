"""Scope descriptors: where string literals may hold class names.

A scope is written as ``<tag>:<id,id,...>``::

    att:className,class   JSX attribute names
    fn:createElement      plain function-call names
    rec:root,header       object-literal keys
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from cnls.errors import ScopeError


class ScopeVariant(Enum):
    ATTRIBUTE_NAME = "att"
    FUNCTION_CALL = "fn"
    OBJECT_KEY = "rec"


_VARIANTS_BY_TAG = {variant.value: variant for variant in ScopeVariant}


@dataclass(frozen=True, slots=True)
class Scope:
    """A scope variant and the identifiers that open it."""

    variant: ScopeVariant
    identifiers: frozenset[str]

    def matches(self, identifier: str, variant: ScopeVariant) -> bool:
        """Exact, case-sensitive match of identifier under variant."""
        return self.variant is variant and identifier in self.identifiers

    def __str__(self) -> str:
        return f"{self.variant.value}:{','.join(sorted(self.identifiers))}"


def parse_scope(text: str) -> Scope:
    """Parse a ``<tag>:<id,...>`` string into a Scope.

    Raises ScopeError on a missing colon, an unknown tag, or an empty
    identifier list. Identifiers are taken verbatim (no trimming).
    """
    tag, sep, rest = text.partition(":")
    if not sep:
        raise ScopeError("expected '<tag>:<identifiers>'", text)

    variant = _VARIANTS_BY_TAG.get(tag)
    if variant is None:
        expected = ", ".join(f"'{t}'" for t in _VARIANTS_BY_TAG)
        raise ScopeError(f"unknown scope tag '{tag}' (expected one of {expected})", text)

    if not rest:
        raise ScopeError("scope needs at least one identifier", text)

    return Scope(variant, frozenset(rest.split(",")))


def parse_scopes(texts: Iterable[str]) -> tuple[list[Scope], list[ScopeError]]:
    """Parse every entry, keeping valid scopes in order and collecting failures."""
    scopes: list[Scope] = []
    errors: list[ScopeError] = []
    for text in texts:
        try:
            scopes.append(parse_scope(text))
        except ScopeError as exc:
            errors.append(exc)
    return scopes, errors


def matches(scopes: Iterable[Scope], identifier: str, variant: ScopeVariant) -> bool:
    """Return True if any scope of the given variant contains identifier."""
    return any(scope.matches(identifier, variant) for scope in scopes)


DEFAULT_SCOPES: tuple[Scope, ...] = (
    parse_scope("att:className,class"),
    parse_scope("fn:createElement"),
)

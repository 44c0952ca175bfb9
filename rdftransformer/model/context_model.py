"""
Context Model

Named-graph contexts targeted by add and clear actions.

A repository API distinguishes three situations:

- no context argument at all (``ContextSet.unspecified()``),
- an explicit list of contexts, possibly empty (``ContextSet.of(...)``),
- the null context inside such a list (``NO_VALUE``), meaning the
  default graph.

Contexts are configured as a space-separated string in which the literal
token ``null`` stands for the null context.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

from rdflib.term import Identifier

from ..repository.value_factory import ValueFactory

logger = logging.getLogger(__name__)

NULL_CONTEXT_TOKEN = "null"


class _NoValue:
    """Marker for the null (default) context."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_VALUE"


NO_VALUE = _NoValue()

ContextEntry = Union[Identifier, _NoValue]


class ContextSetKind(Enum):
    UNSPECIFIED = "unspecified"
    EXPLICIT = "explicit"


@dataclass(frozen=True)
class ContextSet:
    """Ordered contexts for one stage, or the marker that none were configured."""
    kind: ContextSetKind
    entries: Tuple[ContextEntry, ...] = field(default_factory=tuple)

    @classmethod
    def unspecified(cls) -> "ContextSet":
        return cls(ContextSetKind.UNSPECIFIED)

    @classmethod
    def empty(cls) -> "ContextSet":
        return cls(ContextSetKind.EXPLICIT)

    @classmethod
    def of(cls, entries: Iterable[ContextEntry]) -> "ContextSet":
        return cls(ContextSetKind.EXPLICIT, tuple(entries))

    @property
    def is_unspecified(self) -> bool:
        return self.kind is ContextSetKind.UNSPECIFIED

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def store_arguments(self) -> Tuple[Optional[Identifier], ...]:
        """
        Positional context arguments for a repository connection call.

        ``NO_VALUE`` entries become ``None``, the null context.
        """
        return tuple(None if entry is NO_VALUE else entry for entry in self.entries)


def resolve_contexts(contexts_value: Optional[str], value_factory: ValueFactory) -> ContextSet:
    """
    Parse a space-separated context string into a ContextSet.

    Tokens are split on single spaces and kept in order, duplicates
    included. The token ``null`` becomes the null context; every other token
    becomes a URI resource built by ``value_factory``. URIs are not
    validated here.

    Args:
        contexts_value: Context string, or None when no contexts are configured
        value_factory: Factory for URI resources

    Returns:
        ContextSet; unspecified when ``contexts_value`` is None or empty
    """
    if not contexts_value:
        return ContextSet.unspecified()

    entries = []
    for token in contexts_value.split(" "):
        logger.debug(f"Context: '{token}'")
        if token == NULL_CONTEXT_TOKEN:
            entries.append(NO_VALUE)
        else:
            entries.append(value_factory.create_uri(token))
    return ContextSet.of(entries)

"""
Column naming policies.

A naming policy turns a column's qualifier (source table, possibly unknown)
and label into the key a row exposes. Qualified names are ``table/label``:

>>> QUALIFIED.name_of('person', 'name')
'person/name'
>>> UNQUALIFIED.name_of('person', 'name')
'name'
>>> LOWER.name_of('PERSON', 'Name')
'person/name'

Casing functions are always called with a string: an unknown qualifier is
passed as ``''`` so they can be simple ``str -> str`` functions. When the
cased qualifier is empty the name is the bare label.

Unqualified policies make no attempt to deduplicate names: two joined tables
that both have an ``id`` column produce two ``id`` names, and map-shaped
rows keep the later value. Use a qualified policy (or aliases) for joins.
"""
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from sqlrows.types import ColumnDescriptor

__all__ = [
    'NamingPolicy',
    'QUALIFIED',
    'UNQUALIFIED',
    'LOWER',
    'UNQUALIFIED_LOWER',
    'modified',
    'unqualified_modified',
    'identity',
]


def identity(s: str) -> str:
    return s


@dataclass(frozen=True, slots=True)
class NamingPolicy:
    """How a column's exposed name is computed."""
    qualified: bool = True
    qualifier_fn: Callable[[str], str] = identity
    label_fn: Callable[[str], str] = identity

    def name_of(self, qualifier: str | None, label: str) -> str:
        name = self.label_fn(label)
        if not self.qualified:
            return name
        qualifier = self.qualifier_fn(qualifier or '')
        return f'{qualifier}/{name}' if qualifier else name

    def names(self, descriptors: Iterable[ColumnDescriptor]) -> list[str]:
        return [self.name_of(d.qualifier, d.label) for d in descriptors]


QUALIFIED = NamingPolicy()
UNQUALIFIED = NamingPolicy(qualified=False)
LOWER = NamingPolicy(qualifier_fn=str.lower, label_fn=str.lower)
UNQUALIFIED_LOWER = NamingPolicy(qualified=False, label_fn=str.lower)


def modified(qualifier_fn: Callable[[str], str],
             label_fn: Callable[[str], str]) -> NamingPolicy:
    """Qualified names with caller-supplied casing for each segment."""
    return NamingPolicy(qualifier_fn=qualifier_fn, label_fn=label_fn)


def unqualified_modified(label_fn: Callable[[str], str]) -> NamingPolicy:
    """Bare labels with caller-supplied casing."""
    return NamingPolicy(qualified=False, label_fn=label_fn)

"""Declarative description of the JSON fields a document contains."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(slots=True, frozen=True)
class StaticLayout:
    """Resolve the field by rendering ``template`` against the event."""

    template: str


@dataclass(slots=True, frozen=True)
class EventLookup:
    """Resolve the field by looking its name up on the event."""


Resolver = Union[StaticLayout, EventLookup]


@dataclass(slots=True, frozen=True)
class FieldSpec:
    """One named output field and how its value is resolved.

    Examples
    --------
    >>> FieldSpec.parse("level")
    FieldSpec(name='level', resolver=EventLookup())
    >>> FieldSpec.parse("msg={Message}").resolver
    StaticLayout(template='{Message}')
    """

    name: str
    resolver: Resolver = field(default_factory=EventLookup)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("field name must not be empty")

    @classmethod
    def lookup(cls, name: str) -> "FieldSpec":
        return cls(name=name, resolver=EventLookup())

    @classmethod
    def layout(cls, name: str, template: str) -> "FieldSpec":
        return cls(name=name, resolver=StaticLayout(template))

    @classmethod
    def parse(cls, raw: str) -> "FieldSpec":
        """Build a spec from ``name`` or ``name=template`` text."""

        name, sep, template = raw.partition("=")
        name = name.strip()
        if sep:
            return cls.layout(name, template)
        return cls.lookup(name)

    @property
    def template(self) -> str | None:
        if isinstance(self.resolver, StaticLayout):
            return self.resolver.template
        return None


def parse_fields(raw: str) -> tuple[FieldSpec, ...]:
    """Split a comma separated field list into :class:`FieldSpec` entries.

    Examples
    --------
    >>> [spec.name for spec in parse_fields("level, msg={Message}")]
    ['level', 'msg']
    """

    return tuple(FieldSpec.parse(part) for part in raw.split(",") if part.strip())


__all__ = ["EventLookup", "FieldSpec", "Resolver", "StaticLayout", "parse_fields"]

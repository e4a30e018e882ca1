"""
Template types.

A template type is a named category of templates ("page", "layout",
"partial", or anything a caller creates) with a role and its own
collection of records. Types are kept in a ``TypeRegistry`` and addressed
by name; the registry never synthesizes per-type methods.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from stencil.errors import ConfigurationError, ErrorCode
from stencil.utils.observability.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stencil.core.record import TemplateRecord

__all__ = ["Role", "TemplateType", "TypeRegistry"]

logger = get_logger(__name__)


class Role(Enum):
    """What a template type is used for."""

    RENDERABLE = "renderable"
    LAYOUT = "layout"
    PARTIAL = "partial"

    @classmethod
    def from_flags(
        cls,
        *,
        is_renderable: bool = False,
        is_layout: bool = False,
        is_partial: bool = False,
    ) -> Role:
        """Renderable beats layout beats partial; no flag at all means partial."""
        if is_renderable:
            return cls.RENDERABLE
        if is_layout:
            return cls.LAYOUT
        return cls.PARTIAL


@dataclass
class TemplateType:
    """
    A registered template category.

    Attributes:
        singular: Name used for single-record operations and the include helper
        plural: Name of the collection
        role: Renderable, layout or partial
        options: Type-level defaults (``delims``, ``ext``, ...)
        collection: Records keyed by path, in insertion order

    """

    singular: str
    plural: str
    role: Role = Role.PARTIAL
    options: dict[str, Any] = field(default_factory=dict)
    collection: dict[str, TemplateRecord] = field(default_factory=dict)

    @property
    def is_renderable(self) -> bool:
        return self.role is Role.RENDERABLE

    @property
    def is_layout(self) -> bool:
        return self.role is Role.LAYOUT

    @property
    def is_partial(self) -> bool:
        return self.role is Role.PARTIAL


class TypeRegistry:
    """
    Keyed collection of template types.

    Types can be looked up by either their singular or plural name.
    Registration order is preserved; it decides which renderable type wins
    when the same key exists in several collections.

    """

    def __init__(self) -> None:
        self._types: dict[str, TemplateType] = {}
        self._singular: dict[str, str] = {}

    def create(
        self,
        singular: str,
        plural: str,
        *,
        is_renderable: bool = False,
        is_layout: bool = False,
        is_partial: bool = False,
        **options: Any,
    ) -> TemplateType:
        """
        Register (or re-register) a template type.

        Re-registering an existing plural keeps its collection and replaces
        the role and options.

        Raises:
            ConfigurationError: If ``plural`` is not a non-empty string

        """
        if not isinstance(plural, str) or not plural.strip():
            raise ConfigurationError(
                f"A plural form must be defined for: '{singular}'",
                code=ErrorCode.C001,
                suggestion=f"Call create('{singular}', '{singular}s', ...)",
            )
        if not isinstance(singular, str) or not singular.strip():
            raise ConfigurationError(
                f"A singular form must be defined for: '{plural}'",
                code=ErrorCode.C001,
            )

        role = Role.from_flags(
            is_renderable=is_renderable,
            is_layout=is_layout,
            is_partial=is_partial,
        )
        existing = self._types.get(plural)
        if existing is not None:
            existing.singular = singular
            existing.role = role
            existing.options = dict(options)
            template_type = existing
        else:
            template_type = TemplateType(singular=singular, plural=plural, role=role, options=dict(options))
            self._types[plural] = template_type
        self._singular[singular] = plural

        logger.debug("template_type_created", singular=singular, plural=plural, role=role.value)
        return template_type

    def resolve(self, name: str) -> TemplateType:
        """
        Look up a type by singular or plural name.

        Raises:
            ConfigurationError: If no such type exists

        """
        if name in self._types:
            return self._types[name]
        plural = self._singular.get(name)
        if plural is not None:
            return self._types[plural]
        available = ", ".join(sorted(self._types))
        raise ConfigurationError(
            f"Unknown template type: '{name}'. Available: {available}",
            code=ErrorCode.C002,
            suggestion=f"Register it first with create('{name}', '<plural>')",
        )

    def __contains__(self, name: object) -> bool:
        return name in self._types or name in self._singular

    def __iter__(self) -> Iterator[TemplateType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def by_role(self, role: Role) -> list[TemplateType]:
        return [t for t in self._types.values() if t.role is role]

    @property
    def renderable(self) -> list[TemplateType]:
        return self.by_role(Role.RENDERABLE)

    @property
    def layouts(self) -> list[TemplateType]:
        return self.by_role(Role.LAYOUT)

    @property
    def partials(self) -> list[TemplateType]:
        return self.by_role(Role.PARTIAL)

    def type_of(self, record: TemplateRecord) -> TemplateType | None:
        """Return the type owning ``record``, if it has one."""
        if record.type and record.type in self._types:
            return self._types[record.type]
        return None

"""
Extension, engine and delimiter resolution.

Each lookup walks an ordered tuple of ``(name, provider)`` candidates and
returns the first value found. The tuples are module constants so the
order is visible in one place and can be asserted on directly.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from stencil.rendering.delimiters import DelimiterRegistry, DelimiterSet
from stencil.utils.observability.logger import get_logger
from stencil.utils.primitives.paths import UNIVERSAL, extname, format_ext

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from stencil.core.record import TemplateRecord
    from stencil.core.types import TemplateType
    from stencil.rendering.engines import EngineCapability, EngineRegistry

    ExtensionProvider = Callable[[TemplateRecord, Mapping[str, Any]], Any]

__all__ = [
    "DELIMITER_PRECEDENCE",
    "EXTENSION_PRECEDENCE",
    "first_present",
    "resolve_delimiters",
    "resolve_engine",
    "resolve_extension",
]

logger = get_logger(__name__)


# Highest priority first. ``options`` are the explicit options of the
# current call (render-time locals or add-time options).
EXTENSION_PRECEDENCE: tuple[tuple[str, ExtensionProvider], ...] = (
    ("options.ext", lambda record, options: options.get("ext")),
    ("options.engine", lambda record, options: options.get("engine")),
    ("record.options.engine", lambda record, options: record.options.get("engine")),
    ("record.options.ext", lambda record, options: record.options.get("ext")),
    ("record.engine", lambda record, options: record.engine),
    ("record.ext", lambda record, options: record.ext),
    ("record.path", lambda record, options: extname(record.path)),
)

# Names of the delimiter sources, highest priority first; see
# ``resolve_delimiters`` for how each is read.
DELIMITER_PRECEDENCE: tuple[str, ...] = (
    "record.options.delims",
    "record.data.delims",
    "record.locals.delims",
    "type.options.delims",
    "engine.delims",
    "registry[ext]",
    "option.delims",
    "registry[*]",
)


def first_present(candidates: Iterable[tuple[str, Callable[[], Any]]]) -> tuple[str, Any] | tuple[None, None]:
    """Return ``(name, value)`` of the first candidate with a truthy value."""
    for name, provider in candidates:
        value = provider()
        if value:
            return name, value
    return None, None


def resolve_extension(
    record: TemplateRecord,
    options: Mapping[str, Any] | None = None,
    *,
    fallbacks: Iterable[str | None] = (),
) -> str:
    """
    Extension key for ``record``.

    Walks ``EXTENSION_PRECEDENCE``, then ``fallbacks`` in order (type
    default, configured view engine), then the universal ``*``.

    Example:
        >>> record = TemplateRecord(path="a.md", content="", options={"ext": "hbs"})
        >>> resolve_extension(record, {"ext": "jade"})
        '.jade'

    """
    options = options or {}
    for _, provider in EXTENSION_PRECEDENCE:
        value = provider(record, options)
        if value:
            return format_ext(str(value)) or UNIVERSAL
    for value in fallbacks:
        if value:
            return format_ext(value) or UNIVERSAL
    return UNIVERSAL


def resolve_engine(
    engines: EngineRegistry,
    ext: str,
    options: Mapping[str, Any] | None = None,
) -> EngineCapability | None:
    """
    Engine for ``ext``.

    An explicit ``options["engine"]`` wins when it names a registered
    extension or an engine's own ``name``; then the engine registered for
    ``ext``, then the universal engine.
    """
    options = options or {}
    named = options.get("engine")
    if named:
        if named in engines:
            return engines.get(named)
        capability = engines.named(named)
        if capability is not None:
            return capability
        logger.warning("engine_not_found", engine=named, ext=ext)
    return engines.get(ext) or engines.get(UNIVERSAL)


def resolve_delimiters(
    registry: DelimiterRegistry,
    ext: str,
    record: TemplateRecord,
    *,
    template_type: TemplateType | None = None,
    engine: EngineCapability | None = None,
    default: Any = None,
) -> DelimiterSet:
    """
    Delimiters for ``record`` rendered as ``ext``.

    Sources follow ``DELIMITER_PRECEDENCE``: the record's own declaration,
    the type's, the engine's, the set registered for the extension, the
    ``delims`` option, and finally the universal set.
    """
    providers: dict[str, Callable[[], Any]] = {
        "record.options.delims": lambda: record.options.get("delims"),
        "record.data.delims": lambda: record.data.get("delims"),
        "record.locals.delims": lambda: record.locals.get("delims"),
        "type.options.delims": lambda: template_type.options.get("delims") if template_type else None,
        "engine.delims": lambda: engine.delims if engine else None,
        "registry[ext]": lambda: registry.get(ext),
        "option.delims": lambda: default,
        "registry[*]": lambda: registry.get(UNIVERSAL),
    }
    _, value = first_present((name, providers[name]) for name in DELIMITER_PRECEDENCE)
    return registry.coerce(value) or DelimiterSet()

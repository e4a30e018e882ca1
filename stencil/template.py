"""
The ``Template`` orchestrator.

A ``Template`` owns every registry (delimiters, parsers, engines, helpers,
template types and layout resolvers) so independent instances never
interfere. Typical use:

    >>> template = Template()
    >>> template.add("layout", "default", "<main>{% body %}</main>")
    >>> template.add("page", "home.md", "---\\ntitle: Home\\nlayout: default\\n---\\n<%= title %>")
    >>> template.render_sync("home.md")
    '<main>Home</main>'

Rendering runs these stages:

    resolve_template -> apply_parsers -> apply_layout -> build_context
    -> merge_partials -> invoke_engine -> resolve_async_helpers

``preprocess`` performs everything up to the engine call and returns a
``RenderPlan``; ``render`` / ``render_sync`` finish the job.

"""

from __future__ import annotations

from collections import ChainMap
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from stencil.config import Options
from stencil.core.loader import TemplateLoader
from stencil.core.normalize import Normalizer, is_record_shaped
from stencil.core.record import TemplateRecord
from stencil.core.types import Role, TemplateType, TypeRegistry
from stencil.errors import (
    ErrorCode,
    ErrorDebugPayload,
    RelatedFile,
    StencilError,
    TemplateRenderError,
)
from stencil.parsing import FrontMatterParser, NoopParser, ParserRegistry
from stencil.rendering.context import build_context, merge_partials
from stencil.rendering.delimiters import DelimiterRegistry, DelimiterSet
from stencil.rendering.engines import EngineCapability, EngineRegistry
from stencil.rendering.engines.interpolate import InterpolationEngine
from stencil.rendering.engines.noop import NoopEngine
from stencil.rendering.helpers import DeferredHelpers, HelperRegistry
from stencil.rendering.layouts import LayoutResolver, determine_layout
from stencil.rendering.resolution import resolve_delimiters, resolve_engine, resolve_extension
from stencil.rendering.template_functions import register_defaults
from stencil.utils.observability.logger import get_logger
from stencil.utils.primitives.dicts import deep_merge
from stencil.utils.primitives.ids import IdGenerator
from stencil.utils.primitives.paths import UNIVERSAL, format_ext

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from stencil.protocols import Loader

__all__ = ["RenderPlan", "Template"]

logger = get_logger(__name__)

_UNSET: Any = object()


@dataclass
class RenderPlan:
    """Everything resolved for a render, short of invoking the engine."""

    record: TemplateRecord
    ext: str
    engine: EngineCapability
    delims: DelimiterSet
    content: str
    context: dict[str, Any]
    helpers: DeferredHelpers


class Template:
    """
    Template registration and rendering.

    Args:
        options: Initial options (mapping or ``Options``)
        data: Process-wide data, the lowest layer of every render context
        loader: Bulk-add loader; defaults to ``TemplateLoader``

    """

    def __init__(
        self,
        options: Mapping[str, Any] | Options | None = None,
        *,
        data: Mapping[str, Any] | None = None,
        loader: Loader | None = None,
    ) -> None:
        self.options = options if isinstance(options, Options) else Options(options)
        self.data: dict[str, Any] = dict(data or {})

        self.types = TypeRegistry()
        self.delimiters = DelimiterRegistry()
        self.parsers = ParserRegistry()
        self.engines = EngineRegistry()
        self.helpers = HelperRegistry()
        self.layout_engines: dict[str, LayoutResolver] = {}
        self.anonymous: dict[str, TemplateRecord] = {}

        self.ids = IdGenerator()
        self.loader: Loader = loader or TemplateLoader(rename=self.options.get("rename"))
        self.normalizer = Normalizer(self.parsers, self.options, self.ids)
        self._layouts: ChainMap[str, TemplateRecord] = ChainMap()

        self._default_delims()
        self._default_templates()
        self._default_parsers()
        self._default_engines()
        register_defaults(self.helpers)

    # ------------------------------------------------------------------
    # Defaults
    # ------------------------------------------------------------------

    def _default_delims(self) -> None:
        self.add_delims(UNIVERSAL, ["<%", "%>"])
        self.add_delims("es6", ["${", "}"], interpolate_open="${", interpolate_close="}", statements=False)

    def _default_templates(self) -> None:
        self.create("page", "pages", is_renderable=True)
        self.create("layout", "layouts", is_layout=True)
        self.create("partial", "partials")

    def _default_parsers(self) -> None:
        self.parser("md", FrontMatterParser())
        self.parser(UNIVERSAL, NoopParser())

    def _default_engines(self) -> None:
        self.engine(UNIVERSAL, NoopEngine(), layout_delims=["{%", "%}"], dest_ext=".html")
        self.engine(["md", "hbs"], InterpolationEngine(), layout_delims=["{%", "%}"], dest_ext=".html")

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def option(self, key: str | Mapping[str, Any], value: Any = _UNSET) -> Any:
        """
        Get or set options.

        ``option("layout")`` returns a value; ``option("layout", "default")``
        and ``option({...})`` set values and return the template for chaining.
        """
        if isinstance(key, Mapping):
            self.options.update(key)
            return self
        if value is _UNSET:
            return self.options.get(key)
        self.options.set(key, value)
        return self

    # ------------------------------------------------------------------
    # Delimiters, parsers, engines, helpers
    # ------------------------------------------------------------------

    def add_delims(
        self,
        name: str,
        delims: Sequence[str] | DelimiterSet,
        layout_delims: Sequence[str] | None = None,
        **overrides: Any,
    ) -> Template:
        """Register a delimiter set and prime layouts for ``name``."""
        self.delimiters.add(name, delims, layout_delims, **overrides)
        self._lazy_layouts(name, layout_delims)
        return self

    def get_delims(self, name: str) -> DelimiterSet | None:
        return self.delimiters.get(name)

    def parser(self, ext: str | Iterable[str], parser: Any) -> Template:
        """Push ``parser`` onto the stack for ``ext`` (or each of several)."""
        self.parsers.register(ext, parser)
        return self

    def get_parsers(self, ext: str) -> list[Callable[[TemplateRecord], TemplateRecord]] | None:
        return self.parsers.get(ext)

    def _parse_input(
        self,
        record: TemplateRecord | Mapping[str, Any] | str,
        stack: Sequence[Callable[[TemplateRecord], Any]] | None,
        options: Mapping[str, Any] | None,
    ) -> tuple[TemplateRecord, Sequence[Callable[[TemplateRecord], Any]]]:
        if isinstance(record, str):
            record = TemplateRecord(content=record)
        elif not isinstance(record, TemplateRecord):
            record = TemplateRecord.from_dict(dict(record))
        if stack is None:
            ext = resolve_extension(record, options, fallbacks=(self.option("view_engine"), self.option("ext")))
            stack = self.parsers.resolve(ext)
        return record, stack

    async def parse(
        self,
        record: TemplateRecord | Mapping[str, Any] | str,
        stack: Sequence[Callable[[TemplateRecord], Any]] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> TemplateRecord:
        """
        Run a record through a parser stack, awaiting async parsers.

        Without an explicit ``stack`` the stack for the record's resolved
        extension is used, falling back to the universal stack.
        """
        record, stack = self._parse_input(record, stack, options)
        return await self.parsers.run_async(record, stack)

    def parse_sync(
        self,
        record: TemplateRecord | Mapping[str, Any] | str,
        stack: Sequence[Callable[[TemplateRecord], Any]] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> TemplateRecord:
        """
        Synchronous ``parse``.

        Raises:
            UnsupportedOperationError: If a parser in the stack is async
        """
        record, stack = self._parse_input(record, stack, options)
        return self.parsers.run(record, stack)

    def engine(self, ext: str | Iterable[str], engine: Any, **options: Any) -> Template:
        """
        Register ``engine`` for one or more extensions.

        Options:
            delims: Default delimiters for the engine (pair, name or set)
            layout_delims: Delimiters around the layout body tag
            dest_ext: Extension of rendered output
        """
        exts = [ext] if isinstance(ext, str) else list(ext)
        delims = self.delimiters.coerce(options.pop("delims", None))
        for one in exts:
            capability = self.engines.register(one, engine, delims=delims, **options)
            self._lazy_layouts(capability.ext, capability.layout_delims)
        return self

    def get_engine(self, ext: str) -> EngineCapability | None:
        return self.engines.get(ext)

    def engine_helpers(self, ext: str) -> dict[str, Any]:
        """Engine-scoped helpers for ``ext`` (mutable)."""
        capability = self.engines.get(ext)
        return capability.helpers if capability is not None else {}

    def add_helper(self, name: str, fn: Callable[..., Any]) -> Template:
        self.helpers.add(name, fn)
        return self

    def add_helper_async(
        self,
        name: str,
        fn: Callable[..., Any],
        sync_fn: Callable[..., str] | None = None,
    ) -> Template:
        self.helpers.add_async(name, fn, sync_fn)
        return self

    # ------------------------------------------------------------------
    # Layouts
    # ------------------------------------------------------------------

    def _lazy_layouts(self, ext: str, layout_delims: Sequence[str] | None = None) -> LayoutResolver:
        """Create the layout resolver for ``ext`` once."""
        key = format_ext(ext) or UNIVERSAL
        resolver = self.layout_engines.get(key)
        if resolver is None:
            resolver = LayoutResolver(
                key,
                tag=self.option("layout_tag"),
                delims=layout_delims or self.option("layout_delims"),
                layouts=self._layouts,
            )
            self.layout_engines[key] = resolver
            logger.debug("layout_resolver_primed", ext=key, tag=resolver.tag)
        return resolver

    def _refresh_layouts(self) -> None:
        self._layouts = ChainMap(*(t.collection for t in self.types.layouts))
        for resolver in self.layout_engines.values():
            resolver.set_layouts(self._layouts)

    def _default_layout(self, record: TemplateRecord) -> str | None:
        template_type = self.types.type_of(record)
        if template_type is None or template_type.is_renderable:
            return self.option("layout")
        if template_type.is_partial:
            return self.option("partial_layout")
        return None

    def apply_layout(
        self,
        ext: str,
        record: TemplateRecord,
        locals: Mapping[str, Any] | None = None,
    ) -> str:
        """
        Wrap ``record`` in its layout chain for ``ext``.

        The layout name comes from the record (``layout``, ``data.layout``,
        ``locals.layout``), then the call-site ``locals``, then the default
        for the record's role: ``layout`` for renderable templates,
        ``partial_layout`` for partials, none for layouts.

        Raises:
            LayoutCycleError: If the chain loops
        """
        resolver = self.layout_engines.get(format_ext(ext) or UNIVERSAL)
        if resolver is None or record.layout_applied:
            return record.content or ""
        name = determine_layout(record) or (locals or {}).get("layout") or self._default_layout(record)
        return resolver.apply(record, name)

    # ------------------------------------------------------------------
    # Template types
    # ------------------------------------------------------------------

    def create(
        self,
        singular: str,
        plural: str,
        *,
        is_renderable: bool = False,
        is_layout: bool = False,
        is_partial: bool = False,
        **options: Any,
    ) -> Template:
        """
        Define a template type.

        Also registers an async include helper named ``singular`` (unless a
        helper of that name exists), so ``<%= partial("name.md") %>``
        renders the ``name.md`` record of that type in place.

        Raises:
            ConfigurationError: If ``plural`` is not a non-empty string
        """
        template_type = self.types.create(
            singular,
            plural,
            is_renderable=is_renderable,
            is_layout=is_layout,
            is_partial=is_partial,
            **options,
        )
        self._refresh_layouts()
        if singular not in self.helpers:
            include, include_sync = self._include_helpers(template_type)
            self.add_helper_async(singular, include, include_sync)
        return self

    def _include_target(
        self,
        template_type: TemplateType,
        name: str,
        locals: Mapping[str, Any] | None,
    ) -> TemplateRecord | None:
        record = template_type.collection.get(name)
        if record is None:
            logger.warning("helper_template_not_found", helper=template_type.singular, name=name)
            return None
        return replace(
            record,
            locals=deep_merge(record.locals, locals),
            data=dict(record.data),
            meta=dict(record.meta),
        )

    def _include_helpers(
        self,
        template_type: TemplateType,
    ) -> tuple[Callable[..., Any], Callable[..., str]]:
        async def include(name: str, locals: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
            record = self._include_target(template_type, name, deep_merge(locals, kwargs))
            if record is None:
                return ""
            return await self.render(record)

        def include_sync(name: str, locals: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
            record = self._include_target(template_type, name, deep_merge(locals, kwargs))
            if record is None:
                return ""
            return self.render_sync(record)

        return include, include_sync

    def add(
        self,
        type_name: str,
        key: Any,
        value: Any = None,
        locals: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Template:
        """
        Add one template to a type's collection.

        Forms:
            ``add("page", "home.md", "content")``
            ``add("page", "home.md", {"content": "...", "title": "Home"})``
            ``add("page", {"home.md": {"content": "..."}})``
            ``add("page", {"path": "home.md", "content": "..."})``
        """
        template_type = self.types.resolve(type_name)
        entries = self.normalizer.coerce(key, value)
        records = self.normalizer.normalize(entries, locals=locals, options=options, template_type=template_type)
        self._store(template_type, records)
        return self

    def add_many(
        self,
        type_name: str,
        source: Any = None,
        locals: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Add many templates, or return the whole collection when called
        without a source.

        ``source`` is anything the loader accepts: a mapping, a list of
        records or glob pattern(s). The batch is all-or-nothing.
        """
        template_type = self.types.resolve(type_name)
        if source is None:
            return template_type.collection
        loaded = self.loader.load(source, locals, {"rename": self.option("rename")})
        entries = self.normalizer.coerce(loaded) if loaded else {}
        records = self.normalizer.normalize(entries, locals=locals, template_type=template_type)
        self._store(template_type, records)
        return self

    def _store(self, template_type: TemplateType, records: Mapping[str, TemplateRecord]) -> None:
        template_type.collection.update(records)
        if template_type.role is Role.LAYOUT:
            for record in records.values():
                self._lazy_layouts(record.meta.get("ext", UNIVERSAL))

    def get(self, type_name: str, key: str) -> TemplateRecord | None:
        return self.types.resolve(type_name).collection.get(key)

    def get_all(self, type_name: str) -> dict[str, TemplateRecord]:
        return self.types.resolve(type_name).collection

    def normalize(
        self,
        raw: Any,
        options: Mapping[str, Any] | None = None,
        locals: Mapping[str, Any] | None = None,
    ) -> dict[str, TemplateRecord]:
        """Normalize ``raw`` into records without storing them."""
        return self.normalizer.normalize(self.normalizer.coerce(raw), locals=locals, options=options)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _find_renderable(self, name: str) -> TemplateRecord | None:
        for template_type in self.types.renderable:
            record = template_type.collection.get(name)
            if record is not None:
                return record
        return None

    def _anonymous(self, raw: Any, locals: Mapping[str, Any]) -> TemplateRecord:
        explicit = {key: locals[key] for key in ("ext", "engine") if locals.get(key)}
        records = self.normalizer.normalize(self.normalizer.coerce(raw), options=explicit)
        if not self.option("cache_anonymous"):
            self.anonymous.clear()
        self.anonymous.update(records)
        return next(iter(records.values()))

    def _resolve_template(self, template: Any, locals: Mapping[str, Any]) -> TemplateRecord:
        if isinstance(template, TemplateRecord):
            return template
        if isinstance(template, str):
            return self._find_renderable(template) or self._anonymous(template, locals)
        if is_record_shaped(template):
            return self._anonymous(template, locals)
        if isinstance(template, Mapping) and len(template) == 1:
            return self._anonymous(template, locals)
        raise TemplateRenderError(
            f"Cannot render {type(template).__name__}; expected a template name, content or record",
            code=ErrorCode.R001,
            stage="resolve_template",
        )

    def _render_error(self, plan: RenderPlan, stage: str, exc: Exception) -> TemplateRenderError:
        chain = plan.record.meta.get("layout_chain", [])
        return TemplateRenderError(
            f"Rendering '{plan.record.path}' failed during {stage}: {exc}",
            code=ErrorCode.R002 if stage == "invoke_engine" else ErrorCode.R004,
            stage=stage,
            file_path=plan.record.path,
            debug_payload=ErrorDebugPayload(
                template_path=plan.record.path,
                template_type=plan.record.type,
                stage=stage,
                extension=plan.ext,
                engine=plan.engine.name,
                layout_chain=list(chain),
                available_context_vars=sorted(plan.context),
                related_files=[RelatedFile("layout", name) for name in chain],
            ),
        )

    def preprocess(self, template: Any, locals: Mapping[str, Any] | None = None) -> RenderPlan:
        """
        Resolve a template up to the point of invoking its engine.

        Args:
            template: Name of a renderable template, raw content, a
                record-shaped mapping or a ``TemplateRecord``
            locals: Call-site locals; ``ext``/``engine`` keys also act as
                explicit render options

        Raises:
            TemplateRenderError: If the record lacks ``path`` or ``content``
            LayoutCycleError: If the layout chain loops
        """
        locals = dict(locals or {})
        record = self._resolve_template(template, locals)
        if record.path is None or record.content is None:
            missing = "path" if record.path is None else "content"
            raise TemplateRenderError(
                f"render() expects the template to have a '{missing}'",
                code=ErrorCode.N002 if missing == "content" else ErrorCode.N001,
                stage="resolve_template",
                file_path=record.path,
            )
        logger.debug("render_stage", stage="resolve_template", path=record.path)

        template_type = self.types.type_of(record)
        ext = resolve_extension(
            record,
            locals,
            fallbacks=(
                template_type.options.get("ext") if template_type else None,
                self.option("view_engine"),
                self.option("ext"),
            ),
        )
        engine = resolve_engine(self.engines, ext, locals)
        if engine is None:
            raise TemplateRenderError(
                f"No engine registered for '{ext}' and no universal engine",
                code=ErrorCode.R002,
                stage="resolve_template",
                file_path=record.path,
            )
        delims = resolve_delimiters(
            self.delimiters,
            ext,
            record,
            template_type=template_type,
            engine=engine,
            default=self.option("delims"),
        )

        content = self.apply_layout(ext, record, locals)
        logger.debug("render_stage", stage="apply_layout", path=record.path, chain=record.meta.get("layout_chain"))

        context = build_context(
            self.data,
            record,
            locals,
            prefer_data=self.option("prefer_data"),
            context_fn=self.option("context_fn"),
        )
        context = merge_partials(context, self.types.partials, merge=self.option("merge_partials"))

        helpers = self.helpers.session()
        context["helpers"] = {**helpers.callables(), **engine.helpers, **(context.get("helpers") or {})}
        context["delims"] = delims
        logger.debug("render_stage", stage="build_context", path=record.path, ext=ext, engine=engine.name)

        return RenderPlan(
            record=record,
            ext=ext,
            engine=engine,
            delims=delims,
            content=content,
            context=context,
            helpers=helpers,
        )

    async def render(self, template: Any, locals: Mapping[str, Any] | None = None) -> str:
        """
        Render a template with the engine's async ``render``.

        Raises:
            TemplateRenderError: If the engine or a helper fails (the
                original exception is chained)
            StencilError: Any other stencil failure, unchanged
        """
        plan = self.preprocess(template, locals)
        try:
            rendered = await plan.engine.render(plan.content, plan.context)
        except StencilError:
            raise
        except Exception as exc:
            raise self._render_error(plan, "invoke_engine", exc) from exc

        try:
            result = await plan.helpers.resolve(rendered)
        except StencilError:
            raise
        except Exception as exc:
            raise self._render_error(plan, "resolve_async_helpers", exc) from exc
        logger.debug("render_complete", path=plan.record.path, ext=plan.ext)
        return result

    def render_sync(self, template: Any, locals: Mapping[str, Any] | None = None) -> str:
        """
        Render a template with the engine's ``render_sync``.

        Raises:
            UnsupportedOperationError: If the engine has no synchronous render
            TemplateRenderError: If the engine or a helper fails
        """
        plan = self.preprocess(template, locals)
        try:
            rendered = plan.engine.render_sync(plan.content, plan.context)
        except StencilError:
            raise
        except Exception as exc:
            raise self._render_error(plan, "invoke_engine", exc) from exc

        try:
            result = plan.helpers.resolve_sync(rendered)
        except StencilError:
            raise
        except Exception as exc:
            raise self._render_error(plan, "resolve_async_helpers", exc) from exc
        logger.debug("render_complete", path=plan.record.path, ext=plan.ext)
        return result

"""
Interpolation engine.

Renders ``<%= expression %>`` and ``<% statement %>`` templates. The
delimiters come from the ``DelimiterSet`` resolved for the template, so
two templates with different delimiters never affect each other. Syntax
inside the delimiters is Jinja2:

    <%= title %>
    <% for item in items %><%= item %><% endfor %>
    <%= partial("link.md", {"text": "Home"}) %>

Helpers and the render context are both exposed as template globals;
helpers shadow context values with the same name, so an include helper
such as ``layout("x")`` stays callable when the context also carries a
``layout`` key.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from jinja2 import Environment, StrictUndefined, Undefined

from stencil.rendering.delimiters import DEFAULT_DELIMS, DelimiterSet
from stencil.utils.observability.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = ["InterpolationEngine"]

logger = get_logger(__name__)

# Used in place of statement/comment tokens for sets that only interpolate
_DISABLED_OPEN = "\x02\x02"
_DISABLED_CLOSE = "\x03\x03"


class InterpolationEngine:
    """
    Jinja2-backed engine configured per delimiter set.

    One ``jinja2.Environment`` is built and cached for each distinct
    ``DelimiterSet`` seen.

    Args:
        strict: Raise on undefined names instead of rendering them empty
        **env_options: Extra ``jinja2.Environment`` keyword arguments

    """

    name = "interpolate"

    def __init__(self, *, strict: bool = False, **env_options: Any) -> None:
        self.helpers: dict[str, Any] = {}
        self.strict = strict
        self._env_options = env_options
        self._environments: dict[DelimiterSet, Environment] = {}

    def environment(self, delims: DelimiterSet) -> Environment:
        env = self._environments.get(delims)
        if env is None:
            if delims.statements:
                block = (delims.open, delims.close)
                comment = (f"{delims.open}#", f"#{delims.close}")
            else:
                block = (_DISABLED_OPEN, _DISABLED_CLOSE)
                comment = (f"{_DISABLED_OPEN}#", f"#{_DISABLED_CLOSE}")
            env = Environment(
                block_start_string=block[0],
                block_end_string=block[1],
                variable_start_string=delims.interpolate_open,
                variable_end_string=delims.interpolate_close,
                comment_start_string=comment[0],
                comment_end_string=comment[1],
                autoescape=False,
                keep_trailing_newline=True,
                undefined=StrictUndefined if self.strict else Undefined,
                **self._env_options,
            )
            self._environments[delims] = env
            logger.debug(
                "interpolate_environment_created",
                open=delims.interpolate_open,
                close=delims.interpolate_close,
            )
        return env

    def render_sync(self, content: str, context: Mapping[str, Any]) -> str:
        delims = context.get("delims")
        if not isinstance(delims, DelimiterSet):
            delims = DEFAULT_DELIMS
        env = self.environment(delims)
        namespace = {**context, **self.helpers, **(context.get("helpers") or {})}
        return env.from_string(content).render(namespace)

    async def render(self, content: str, context: Mapping[str, Any]) -> str:
        return self.render_sync(content, context)

# File: pgmodelgen/templates.py
"""
pgmodelgen - Template Renderer
===============================

Expands the Jinja2 templates shipped in ``pgmodelgen/jinja`` and runs the
result through ``black``.

Formatting is best-effort: when ``black`` rejects the expanded text the raw
text is returned unchanged (and flagged), so a broken expansion can still
be inspected on disk.  Expansion errors are not recoverable and surface as
``RenderError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, List, Mapping

import black
from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from pgmodelgen.errors import RenderError
from pgmodelgen.typemap import FieldKind

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("pgmodelgen.templates")

# ---------------------------------------------------------------------------
# Template names
# ---------------------------------------------------------------------------

VAR_TEMPLATE: str = "var.py.j2"
BASE_FIELD_TEMPLATE: str = "base_field_gen.py.j2"
MODEL_GEN_TEMPLATE: str = "model_gen.py.j2"
MODEL_TEMPLATE: str = "model.py.j2"

# SQLAlchemy column type expression per field kind, as written in the
# generated module.
_SA_TYPES: Mapping[FieldKind, str] = MappingProxyType({
    FieldKind.INT64: "sa.BigInteger()",
    FieldKind.FLOAT64: "sa.Float()",
    FieldKind.STRING: "sa.Text()",
    FieldKind.BOOL: "sa.Boolean()",
    FieldKind.BYTES: "sa.LargeBinary()",
    FieldKind.DECIMAL: "sa.Numeric()",
    FieldKind.TIME: "sa.DateTime(timezone=True)",
    FieldKind.INT64_ARRAY: "postgresql.ARRAY(sa.BigInteger())",
    FieldKind.STRING_ARRAY: "postgresql.ARRAY(sa.Text())",
    FieldKind.FLOAT64_ARRAY: "postgresql.ARRAY(sa.Float())",
    FieldKind.BOOL_ARRAY: "postgresql.ARRAY(sa.Boolean())",
    FieldKind.GENERIC: "sa.types.NullType()",
})


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def _kind(value: Any) -> FieldKind:
    return value if isinstance(value, FieldKind) else FieldKind(value)


def field_class(kind: Any) -> str:
    """Name of the ``base_field_gen`` class for a field kind."""
    return f"{_kind(kind).value}Field"


def sa_type(kind: Any) -> str:
    return _SA_TYPES[_kind(kind)]


def oneline(text: str) -> str:
    """Collapse whitespace so a comment fits on one source line."""
    return " ".join(str(text).split())


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RenderedSource:
    """Expanded template text and whether ``black`` accepted it."""

    text: str
    formatted: bool


def format_source(text: str, *, label: str = "<generated>") -> RenderedSource:
    try:
        return RenderedSource(black.format_str(text, mode=black.Mode()), True)
    except black.InvalidInput as exc:
        logger.warning("Could not format %s, keeping raw output: %s", label, exc)
        return RenderedSource(text, False)


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """
    Jinja2 environment with the generator's filters registered.

    Usage::

        renderer = TemplateRenderer()
        source = renderer.render(MODEL_GEN_TEMPLATE, {"meta": table_model, ...})
        print(source.text)
    """

    def __init__(self, *, format_output: bool = True) -> None:
        self._format_output = format_output
        self._env = Environment(
            loader=PackageLoader("pgmodelgen", "jinja"),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            autoescape=False,
            auto_reload=False,
        )
        self._env.filters["field_class"] = field_class
        self._env.filters["sa_type"] = sa_type
        self._env.filters["pyrepr"] = repr
        self._env.filters["oneline"] = oneline

    def expand(self, template_name: str, context: Mapping[str, Any]) -> str:
        """Expand a template without formatting."""
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except TemplateError as exc:
            raise RenderError(template_name, str(exc)) from exc

    def render(self, template_name: str, context: Mapping[str, Any]) -> RenderedSource:
        text = self.expand(template_name, context)
        if not self._format_output:
            return RenderedSource(text, False)
        return format_source(text, label=template_name)


__all__: List[str] = [
    "VAR_TEMPLATE",
    "BASE_FIELD_TEMPLATE",
    "MODEL_GEN_TEMPLATE",
    "MODEL_TEMPLATE",
    "RenderedSource",
    "TemplateRenderer",
    "field_class",
    "format_source",
    "oneline",
    "sa_type",
]

"""Hook template rendering.

Payload URLs and bodies are operator-configured Jinja2 templates. They are
rendered in an immutable sandbox: templates can read the event context,
branch and loop, and call the registered filters, but cannot reach host
objects or mutate the context.

Templates use Jinja2 syntax, so filter arguments are passed in call form:
a Liquid-style ``{{ item.grand_total | number_format: 2 }}`` is written
``{{ item.grand_total | number_format(2) }}``. Hook bodies written for
Liquid need that change before they render unchanged; field names such as
the ``_ship`` suffixed order totals are kept as they were.
"""

from collections.abc import Callable, Mapping
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import structlog
from jinja2 import TemplateError
from jinja2.sandbox import ImmutableSandboxedEnvironment

from storehook.errors import TemplateRenderError

logger = structlog.get_logger(__name__)

Filter = Callable[..., Any]


def format_number(
    value: Any,
    decimals: int = 2,
    dec_point: str = ".",
    thousands_sep: str = "",
) -> str:
    """Format a number with fixed decimals and custom separators.

    Args:
        value: Number or numeric string.
        decimals: Digits after the decimal point.
        dec_point: Decimal separator.
        thousands_sep: Thousands separator (empty for none).

    Returns:
        Formatted number, e.g. ``format_number(1234.5)`` -> ``"1234.50"``
        and ``format_number(0.125)`` -> ``"0.13"``.

    Raises:
        decimal.InvalidOperation: If value is not numeric.
    """
    # Halves round away from zero
    quantum = Decimal(1).scaleb(-decimals)
    amount = Decimal(str(value or 0)).quantize(quantum, rounding=ROUND_HALF_UP)
    formatted = f"{amount:,.{decimals}f}"
    whole, _, fraction = formatted.partition(".")
    whole = whole.replace(",", thousands_sep)
    return f"{whole}{dec_point}{fraction}" if fraction else whole


def format_price(value: Any) -> str:
    """Format a price with two decimals and a dot separator."""
    return format_number(value, 2, ".", "")


def if_empty(value: Any, default: Any = "") -> Any:
    """Return ``default`` when value is empty or undefined."""
    return value if value else default


def format_date(value: Any, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Format a datetime or ISO-8601 string."""
    if not value:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.strftime(fmt)


class FilterSet:
    """Named filter functions made available to hook templates."""

    def __init__(self, filters: Mapping[str, Filter] | None = None) -> None:
        self._filters: dict[str, Filter] = dict(filters or {})

    @classmethod
    def default(cls) -> "FilterSet":
        """Filters available to every hook template."""
        return cls(
            {
                "price": format_price,
                "number_format": format_number,
                "if_empty": if_empty,
                "date_format": format_date,
            }
        )

    def register(self, name: str, func: Filter) -> None:
        """Add or replace a filter."""
        self._filters[name] = func

    def names(self) -> list[str]:
        return sorted(self._filters)

    def as_dict(self) -> dict[str, Filter]:
        return dict(self._filters)


class TemplateRenderer:
    """Renders hook templates against an event context.

    Example:
        renderer = TemplateRenderer()
        url = renderer.render("https://x.test/{{ item.increment_id }}", {"item": ctx})
    """

    def __init__(self, filters: FilterSet | None = None) -> None:
        self._env = ImmutableSandboxedEnvironment(autoescape=False)
        self._env.filters.update((filters or FilterSet.default()).as_dict())

    def render(self, template: str | None, variables: Mapping[str, Any]) -> str:
        """Render a template.

        Args:
            template: Template source; empty or None renders to "".
            variables: Top-level template variables.

        Returns:
            The rendered string.

        Raises:
            TemplateRenderError: If the template fails to parse or evaluate.
        """
        if not template:
            return ""

        try:
            return self._env.from_string(template).render(**variables)
        except TemplateError as e:
            raise TemplateRenderError(
                f"Template error: {e}", template=template
            ) from e
        except Exception as e:
            # Filters run operator data through Python code
            raise TemplateRenderError(
                f"Template evaluation failed: {e}", template=template
            ) from e

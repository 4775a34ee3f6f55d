"""
Variable Substitution
=====================

Fills ``{{#if key}}...{{/if}}`` blocks and ``{{key}}`` placeholders in slide templates.

Conditional blocks are resolved first: a block whose key is missing or falsy is
removed together with its delimiters, otherwise its body is kept untouched.
Scalar placeholders are replaced afterwards, so variables inside a dropped block
are never substituted. Unknown placeholders are left verbatim.

Nested conditionals are not supported. The block pattern is non-greedy and
stops at the first ``{{/if}}``, so an inner ``{{#if}}`` ends the outer block early.
"""

import re
from typing import Any, Mapping

CONDITIONAL_PATTERN = re.compile(r"\{\{#if (\w+)\}\}(.*?)\{\{/if\}\}", re.DOTALL)
VARIABLE_PATTERN = re.compile(r"\{\{(\w+)\}\}")

LINE_BREAK = "<br>"


def is_truthy(value: Any) -> bool:
    """Truthiness used for conditional blocks (empty strings, 0 and None are false)."""
    return bool(value)


def stringify(value: Any) -> str:
    """Render a context value as template text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str):
        return value.replace("\r\n", "\n").replace("\n", LINE_BREAK)
    return str(value)


def resolve_conditionals(template: str, context: Mapping[str, Any]) -> str:
    """Keep or drop every ``{{#if key}}`` block."""

    def _replace(match: "re.Match[str]") -> str:
        key, body = match.group(1), match.group(2)
        return body if is_truthy(context.get(key)) else ""

    return CONDITIONAL_PATTERN.sub(_replace, template)


def substitute_variables(template: str, context: Mapping[str, Any]) -> str:
    """Replace ``{{key}}`` placeholders whose key is in the context."""

    def _replace(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key not in context:
            return match.group(0)
        return stringify(context[key])

    return VARIABLE_PATTERN.sub(_replace, template)


def substitute(template: str, context: Mapping[str, Any]) -> str:
    """
    Produce final HTML from template text and a render context.

    Args:
        template: Raw template text
        context: Flat key/value render context

    Returns:
        HTML with conditionals resolved and known placeholders replaced
    """
    return substitute_variables(resolve_conditionals(template, context), context)

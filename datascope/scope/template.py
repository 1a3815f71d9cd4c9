from __future__ import annotations

import re
from collections.abc import Mapping

from .errors import TemplateResolutionError

_PLACEHOLDER_RE = re.compile(r"\$\{\s*([A-Za-z_][A-Za-z0-9_.]*)\s*\}")
_ID_LIST_RE = re.compile(r"^\s*-?\d+(\s*,\s*-?\d+)*\s*$")


def placeholders(template: str) -> list[str]:
    """Names referenced by ``${name}`` placeholders, in order of appearance."""
    return _PLACEHOLDER_RE.findall(template)


def _check_resolvable(template: str | None, attributes: Mapping[str, str]) -> str:
    if template is None:
        raise TemplateResolutionError(template, [])

    missing = [name for name in placeholders(template) if name not in attributes]
    if missing:
        raise TemplateResolutionError(template, sorted(set(missing)))
    return template


def resolve_placeholders(template: str | None, attributes: Mapping[str, str]) -> str:
    """
    Substitute every ``${name}`` in ``template`` from ``attributes``.

    Unknown names raise TemplateResolutionError; a placeholder is never
    replaced with an empty string.
    """

    template = _check_resolvable(template, attributes)
    return _PLACEHOLDER_RE.sub(lambda m: str(attributes[m.group(1)]), template)


def resolve_sql_placeholders(template: str | None, attributes: Mapping[str, str]) -> str:
    """
    Substitute placeholders in a SQL condition.

    A placeholder written inside quotes (``'${user_name}'``) takes any value,
    with embedded single quotes doubled. A bare placeholder
    (``in (${dept_id})``) only takes a number or a comma-separated list of
    numbers; anything else raises TemplateResolutionError.
    """

    template = _check_resolvable(template, attributes)

    def substitute(m: re.Match[str]) -> str:
        name = m.group(1)
        value = str(attributes[name])
        quoted = m.start() > 0 and template[m.start() - 1] == "'" and template[m.end() : m.end() + 1] == "'"
        if quoted:
            return value.replace("'", "''")
        if not _ID_LIST_RE.match(value):
            raise TemplateResolutionError(template, [name], reason="Non-numeric value for unquoted placeholder")
        return value

    return _PLACEHOLDER_RE.sub(substitute, template)

"""Tests for CUSTOM template placeholder resolution."""

import pytest

from datascope.scope.errors import TemplateResolutionError
from datascope.scope.template import placeholders, resolve_placeholders, resolve_sql_placeholders


def test_resolves_every_placeholder():
    template = "where scope.create_user = ${user_id} or scope.tenant_id = '${tenant_id}'"
    resolved = resolve_placeholders(template, {"user_id": "7", "tenant_id": "000000"})
    assert resolved == "where scope.create_user = 7 or scope.tenant_id = '000000'"


def test_repeated_placeholder_and_whitespace_inside_braces():
    resolved = resolve_placeholders("${ dept_id }|${dept_id}", {"dept_id": "10,20"})
    assert resolved == "10,20|10,20"


def test_template_without_placeholders_is_unchanged():
    template = "where scope.status = 1"
    assert resolve_placeholders(template, {}) == template


def test_missing_placeholder_raises_with_names():
    with pytest.raises(TemplateResolutionError) as exc_info:
        resolve_placeholders("where a = ${user_id} and b = ${region} and c = ${zone}", {"user_id": "1"})
    assert exc_info.value.missing == ["region", "zone"]


def test_none_template_raises():
    with pytest.raises(TemplateResolutionError):
        resolve_placeholders(None, {"user_id": "1"})


def test_placeholders_lists_names_in_order():
    assert placeholders("${b} ${a} ${b}") == ["b", "a", "b"]


def test_sql_quoted_placeholder_escapes_single_quotes():
    resolved = resolve_sql_placeholders("where scope.owner = '${user_name}'", {"user_name": "O'Brien"})
    assert resolved == "where scope.owner = 'O''Brien'"


def test_sql_bare_placeholder_accepts_id_lists():
    resolved = resolve_sql_placeholders("where scope.dept_id in (${dept_id})", {"dept_id": "10, 20"})
    assert resolved == "where scope.dept_id in (10, 20)"


@pytest.mark.parametrize("value", ["admin", "1 or 1=1", "1,", ""])
def test_sql_bare_placeholder_rejects_non_numeric_values(value):
    with pytest.raises(TemplateResolutionError) as exc_info:
        resolve_sql_placeholders("where scope.create_user = ${account}", {"account": value})
    assert exc_info.value.missing == ["account"]

"""Tests for ScopeResolver rule lookup and department resolution."""

import pytest

from datascope.scope.cache import DEPT_CACHE_ANCESTORS, NOT_FOUND, SCOPE_CACHE_CLASS, SCOPE_CACHE_CODE
from datascope.scope.errors import InvalidScopeType
from datascope.scope.types import ScopeRule, ScopeType


OWN_DEPT = ScopeRule(code="user_own_dept", type=ScopeType.OWN_DEPT, column="dept_id")
OWN = ScopeRule(code=None, type=ScopeType.OWN, column="create_user")
DEFAULT = ScopeRule(code="user_own_dept", type=ScopeType.ALL)


def test_mapper_rule_wins_over_code_rule(store, resolver):
    store.add_mapper_rule("UserMapper.list", 2, OWN)
    store.add_code_rule(OWN_DEPT)

    rule = resolver.resolve_rule("UserMapper.list", "user_own_dept", [1, 2], DEFAULT)

    assert rule == OWN
    assert store.count("code") == 0


def test_falls_back_to_code_rule(store, resolver):
    store.add_code_rule(OWN_DEPT)

    rule = resolver.resolve_rule("UserMapper.list", "user_own_dept", "1,2", DEFAULT)

    assert rule == OWN_DEPT
    assert store.count("mapper") == 1
    assert store.count("code") == 1


def test_falls_back_to_default_when_nothing_stored(store, resolver):
    assert resolver.resolve_rule("UserMapper.list", "user_own_dept", [1], DEFAULT) is DEFAULT


def test_blank_code_skips_code_lookup(store, resolver):
    assert resolver.resolve_rule("UserMapper.list", "  ", [1], DEFAULT) is DEFAULT
    assert resolver.resolve_rule("UserMapper.list", None, [1], None) is None
    assert store.count("code") == 0


def test_first_stored_rule_is_used(store, resolver):
    store.add_mapper_rule("UserMapper.list", 1, OWN)
    store.add_mapper_rule("UserMapper.list", 2, OWN_DEPT)

    assert resolver.resolve_rule("UserMapper.list", None, [1, 2], None) == OWN


def test_lookup_is_negative_cached(store, cache, resolver):
    first = resolver.resolve_rule("UserMapper.list", "user_own_dept", [1, 2], DEFAULT)
    second = resolver.resolve_rule("UserMapper.list", "user_own_dept", [1, 2], DEFAULT)

    assert first == second == DEFAULT
    assert store.count("mapper") == 1
    assert store.count("code") == 1
    assert cache.get(SCOPE_CACHE_CLASS, "UserMapper.list:1,2") is NOT_FOUND
    assert cache.get(SCOPE_CACHE_CODE, "user_own_dept") is NOT_FOUND


def test_lookup_is_served_from_cache_once_found(store, cache, resolver):
    store.add_code_rule(OWN_DEPT)

    first = resolver.resolve_rule("UserMapper.list", "user_own_dept", [1], DEFAULT)
    second = resolver.resolve_rule("UserMapper.list", "user_own_dept", [1], DEFAULT)

    assert first == second == OWN_DEPT
    assert store.count("code") == 1
    assert cache.get(SCOPE_CACHE_CODE, "user_own_dept") == OWN_DEPT


def test_cache_key_includes_roles(store, resolver):
    store.add_mapper_rule("UserMapper.list", 2, OWN)

    assert resolver.resolve_rule("UserMapper.list", None, [1], None) is None
    assert resolver.resolve_rule("UserMapper.list", None, [2], None) == OWN
    assert store.count("mapper") == 2


def test_invalid_type_from_cache_is_rejected(cache, resolver):
    class LegacyRule:
        code = "legacy"
        type = 99

    cache.put(SCOPE_CACHE_CODE, "legacy", LegacyRule())

    with pytest.raises(InvalidScopeType):
        resolver.resolve_rule("UserMapper.list", "legacy", [1], None)


def test_department_ancestors_are_cached(store, cache, resolver):
    store.children[10] = [11, 12]

    assert resolver.resolve_department_ancestors(10) == [11, 12]
    assert resolver.resolve_department_ancestors(10) == [11, 12]
    assert store.count("dept") == 1
    assert cache.get(DEPT_CACHE_ANCESTORS, 10) == (11, 12)


def test_root_department_resolves_to_empty_list(store, resolver):
    assert resolver.resolve_department_ancestors(1) == []
    assert resolver.resolve_department_ancestors(1) == []
    assert store.count("dept") == 1

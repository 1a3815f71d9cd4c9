"""
Scope resolution and filter synthesis.

Given the query being executed, the user it runs for and the scope declared
for it, ``ScopeResolver`` decides which rule applies and turns it into a
wrapping query:

    select <field> from (<original sql>) scope where scope.<column> in (<ids>)

The original SQL is embedded verbatim and never parsed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Sequence
from typing import Any, assert_never

from .cache import DEPT_CACHE_ANCESTORS, NOT_FOUND, SCOPE_CACHE_CLASS, SCOPE_CACHE_CODE, ScopeCache
from .errors import InvalidScopeRule, UnresolvedRule
from .store import ScopeStore
from .template import resolve_sql_placeholders
from .types import DataScope, ScopeRule, ScopeType, UserContext, parse_id_list

logger = logging.getLogger(__name__)

DENY_ALL_CONDITION = "where 1 = 0"


class ScopeResolver:
    def __init__(self, store: ScopeStore, cache: ScopeCache) -> None:
        self._store = store
        self._cache = cache

    # ---- Rule lookup -----------------------------------------------------------------

    def resolve_rule(
        self,
        mapper_id: str,
        code: str | None,
        role_ids: Sequence[int] | str,
        default: ScopeRule | None,
    ) -> ScopeRule | None:
        """
        Pick the rule for a query.

        Order: stored rule bound to (mapper_id, any of role_ids), then stored
        rule for the resource ``code``, then ``default``. Both lookups are
        cached, including misses. When several stored rules match, the first
        in store order wins.
        """

        roles = parse_id_list(role_ids)
        rule = self._rule_by_mapper(mapper_id, roles)
        if rule is None and code and code.strip():
            rule = self._rule_by_code(code.strip())
        if rule is None:
            rule = default
        if rule is not None:
            ScopeType.of(rule.type)
        return rule

    def _rule_by_mapper(self, mapper_id: str, role_ids: list[int]) -> ScopeRule | None:
        key = f"{mapper_id}:{','.join(str(r) for r in role_ids)}"

        def load() -> ScopeRule | None:
            rules = self._store.rules_by_mapper(mapper_id, role_ids)
            return rules[0] if rules else None

        return self._cached(SCOPE_CACHE_CLASS, key, load)

    def _rule_by_code(self, code: str) -> ScopeRule | None:
        def load() -> ScopeRule | None:
            rules = self._store.rules_by_code(code)
            return rules[0] if rules else None

        return self._cached(SCOPE_CACHE_CODE, code, load)

    def _cached(self, namespace: str, key: Hashable, load: Callable[[], Any]) -> Any:
        value = self._cache.get(namespace, key)
        if value is NOT_FOUND:
            return None
        if value is not None:
            return value

        logger.debug("Scope cache miss namespace=%s key=%s", namespace, key)
        value = load()
        self._cache.put(namespace, key, NOT_FOUND if value is None else value)
        return value

    # ---- Hierarchy -------------------------------------------------------------------

    def resolve_department_ancestors(self, dept_id: int) -> list[int]:
        """
        Department ids related to ``dept_id`` through the hierarchy.

        A root department resolves to an empty list; the empty result is
        cached like any other.
        """

        ids = self._cached(DEPT_CACHE_ANCESTORS, dept_id, lambda: tuple(self._store.department_ancestors(dept_id)))
        return list(ids)

    # ---- Synthesis -------------------------------------------------------------------

    def filter_ids(self, rule: ScopeRule, user: UserContext) -> list[int]:
        """Ids matched against ``scope.<column>``; empty for ALL and CUSTOM."""

        scope_type = rule.type
        if scope_type is ScopeType.ALL or scope_type is ScopeType.CUSTOM:
            return []
        elif scope_type is ScopeType.OWN:
            return [user.user_id]
        elif scope_type is ScopeType.OWN_DEPT:
            return user.dept_ids
        elif scope_type is ScopeType.OWN_DEPT_CHILD:
            dept_ids = user.dept_ids
            ids = list(dept_ids)
            for dept_id in dept_ids:
                ids.extend(self.resolve_department_ancestors(dept_id))
            return ids
        else:
            assert_never(scope_type)

    def synthesize(self, rule: ScopeRule | None, user: UserContext, original_sql: str) -> str | None:
        """
        Wrap ``original_sql`` so it only returns rows ``user`` may see.

        Returns None for ALL: the caller runs the original statement as is.
        An empty id set denies every row rather than emitting ``in ()``.
        """

        if rule is None:
            raise UnresolvedRule()

        scope_type = ScopeType.of(rule.type)
        if scope_type is ScopeType.ALL:
            return None

        head = f"select {rule.projection} from ({original_sql}) scope"
        if scope_type is ScopeType.CUSTOM:
            condition = resolve_sql_placeholders(rule.value, user.to_attributes())
            return f"{head} {condition.strip()}"

        if not rule.column:
            raise InvalidScopeRule(f"Scope rule {rule.code!r} of type {scope_type.name} has no column")

        ids = self.filter_ids(rule, user)
        if not ids:
            logger.info(
                "Empty id set for scope rule code=%s type=%s user=%s; denying all rows",
                rule.code,
                scope_type.name,
                user.user_id,
            )
            return f"{head} {DENY_ALL_CONDITION}"

        return f"{head} where scope.{rule.column} in ({','.join(str(int(i)) for i in ids)})"

    def sql_condition(self, declaration: DataScope, user: UserContext, original_sql: str) -> str | None:
        """Resolve the rule for ``declaration`` and synthesize the scoped SQL."""

        rule = self.resolve_rule(declaration.mapper_id, declaration.code, user.role_ids, declaration.default)
        if rule is None:
            raise UnresolvedRule(declaration.mapper_id, declaration.code)

        scoped = self.synthesize(rule, user, original_sql)
        logger.debug(
            "Data scope mapper=%s code=%s type=%s applied=%s",
            declaration.mapper_id,
            rule.code,
            rule.type.name,
            scoped is not None,
        )
        return scoped

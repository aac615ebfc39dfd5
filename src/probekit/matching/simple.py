"""
In-process reference matcher.

SimpleMatcher evaluates a small filter language against document bodies.
It is what the command line uses to replay events, and what tests use to
drive watcher and sampler probes without a real matching engine.

Filter syntax (field names accept dotted paths):

    {}                                          matches everything
    {"equals":   {"field": value}}              alias: "term"
    {"in":       {"field": [value, ...]}}       alias: "terms"
    {"contains": {"field": "substring"}}
    {"regex":    {"field": "pattern"}}
    {"exists":   {"field": "field"}}            or {"exists": "field"}
    {"range":    {"field": {"gt": 1, "lte": 5}}}
    {"and": [filter, ...]}, {"or": [filter, ...]}, {"not": filter}
"""

import hashlib
import json
import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..probes.collector import get_path
from .base import Matcher

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]

_MISSING = object()

_RANGE_OPERATORS = {
    "gt": lambda value, bound: value > bound,
    "gte": lambda value, bound: value >= bound,
    "lt": lambda value, bound: value < bound,
    "lte": lambda value, bound: value <= bound,
}


def _single_field(operator: str, argument: Any) -> Tuple[str, Any]:
    if not isinstance(argument, Mapping) or len(argument) != 1:
        raise ValueError(f'"{operator}" expects exactly one field, got {argument!r}')
    return next(iter(argument.items()))


def _compile_equals(argument: Any) -> Predicate:
    field_path, expected = _single_field("equals", argument)
    return lambda body: get_path(body, field_path, _MISSING) == expected


def _compile_in(argument: Any) -> Predicate:
    field_path, values = _single_field("in", argument)
    if not isinstance(values, (list, tuple)):
        raise ValueError(f'"in" expects a list of values for {field_path}')
    return lambda body: get_path(body, field_path, _MISSING) in values


def _compile_contains(argument: Any) -> Predicate:
    field_path, needle = _single_field("contains", argument)

    def predicate(body: Any) -> bool:
        value = get_path(body, field_path, _MISSING)
        return isinstance(value, (str, list, tuple)) and needle in value
    return predicate


def _compile_regex(argument: Any) -> Predicate:
    field_path, pattern = _single_field("regex", argument)
    compiled = re.compile(pattern)

    def predicate(body: Any) -> bool:
        value = get_path(body, field_path, _MISSING)
        return isinstance(value, str) and compiled.search(value) is not None
    return predicate


def _compile_exists(argument: Any) -> Predicate:
    if isinstance(argument, Mapping):
        argument = argument.get("field")
    if not isinstance(argument, str) or not argument:
        raise ValueError(f'"exists" expects a field name, got {argument!r}')
    return lambda body: get_path(body, argument, _MISSING) is not _MISSING


def _compile_range(argument: Any) -> Predicate:
    field_path, bounds = _single_field("range", argument)
    if not isinstance(bounds, Mapping) or not bounds:
        raise ValueError(f'"range" expects bounds for {field_path}')
    unknown = set(bounds) - set(_RANGE_OPERATORS)
    if unknown:
        raise ValueError(f'unknown range operator(s): {sorted(unknown)}')

    def predicate(body: Any) -> bool:
        value = get_path(body, field_path, _MISSING)
        if value is _MISSING or value is None:
            return False
        try:
            return all(_RANGE_OPERATORS[op](value, bound) for op, bound in bounds.items())
        except TypeError:
            return False
    return predicate


def _compile_and(argument: Any) -> Predicate:
    predicates = [compile_filter(item) for item in _filter_list("and", argument)]
    return lambda body: all(predicate(body) for predicate in predicates)


def _compile_or(argument: Any) -> Predicate:
    predicates = [compile_filter(item) for item in _filter_list("or", argument)]
    return lambda body: any(predicate(body) for predicate in predicates)


def _compile_not(argument: Any) -> Predicate:
    predicate = compile_filter(argument)
    return lambda body: not predicate(body)


def _filter_list(operator: str, argument: Any) -> List[Mapping[str, Any]]:
    if not isinstance(argument, (list, tuple)) or not argument:
        raise ValueError(f'"{operator}" expects a non-empty list of filters')
    return list(argument)


_OPERATORS: Dict[str, Callable[[Any], Predicate]] = {
    "equals": _compile_equals,
    "term": _compile_equals,
    "in": _compile_in,
    "terms": _compile_in,
    "contains": _compile_contains,
    "regex": _compile_regex,
    "exists": _compile_exists,
    "range": _compile_range,
    "and": _compile_and,
    "or": _compile_or,
    "not": _compile_not,
}


def compile_filter(filter: Mapping[str, Any]) -> Predicate:
    """
    Compile a filter expression into a predicate over document bodies.

    Several operators in the same mapping are combined with "and".

    Raises:
        ValueError: If the filter is malformed
    """
    if not isinstance(filter, Mapping):
        raise ValueError(f"a filter must be a mapping, got {filter!r}")
    if not filter:
        return lambda body: True

    predicates = []
    for operator, argument in filter.items():
        if operator not in _OPERATORS:
            raise ValueError(f'unknown filter operator "{operator}"')
        predicates.append(_OPERATORS[operator](argument))

    if len(predicates) == 1:
        return predicates[0]
    return lambda body: all(predicate(body) for predicate in predicates)


def filter_id_for(index: str, collection: str, filter: Mapping[str, Any]) -> str:
    """Deterministic id of an index/collection/filter triple."""
    canonical = json.dumps(
        {"index": index, "collection": collection, "filter": filter},
        sort_keys=True,
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:32]


class SimpleMatcher(Matcher):
    """
    Matcher evaluating filters in-process.

    Identical triples share the same filter id.
    """

    def __init__(self):
        self._filters: Dict[Tuple[str, str], Dict[str, Predicate]] = {}

    def register(self, index: str, collection: str, filter: Mapping[str, Any]) -> str:
        predicate = compile_filter(filter or {})
        filter_id = filter_id_for(index, collection, filter or {})
        self._filters.setdefault((index, collection), {})[filter_id] = predicate
        logger.debug(f"Registered filter {filter_id} on {index}/{collection}")
        return filter_id

    def test(
        self,
        index: str,
        collection: str,
        body: Any,
        document_id: Optional[str] = None
    ) -> List[str]:
        filters = self._filters.get((index, collection), {})
        return [filter_id for filter_id, predicate in filters.items() if predicate(body)]

    def __len__(self) -> int:
        return sum(len(filters) for filters in self._filters.values())

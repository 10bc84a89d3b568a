"""Matchers: reusable predicates with a human-readable description.

A matcher answers `matches(candidate)` and describes itself with `describe()`,
which is embedded verbatim in verification failure messages. Matchers from other
libraries (anything exposing `matches` and a descriptive `__str__`, such as
PyHamcrest matchers) can be used through `as_matcher`.
"""

import operator
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sized
from typing import Any, ClassVar


def describe_value(value: Any) -> str:
    match value:
        case None:
            return "null"
        case str():
            return f'"{value}"'
        case _:
            return str(value)


def coerce(value: Any, value_type: type | None) -> Any:
    """Convert response text to the type a matcher compares against.

    Raises:
        ValueError: If the value cannot be represented as `value_type`.
    """
    if value_type is None or isinstance(value, value_type):
        return value
    if value_type is bool:
        lowered = str(value).strip().lower()
        if lowered not in ("true", "false"):
            raise ValueError(f"'{value}' is not a boolean")
        return lowered == "true"
    try:
        return value_type(value)
    except TypeError as e:
        raise ValueError(str(e)) from None


class Matcher(ABC):
    is_collection_matcher: ClassVar[bool] = False
    value_type: type | None = None

    @abstractmethod
    def matches(self, candidate: Any) -> bool: ...

    @abstractmethod
    def describe(self) -> str: ...

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.describe()}>"


class CollectionMatcher(Matcher):
    """A matcher that receives the full list of extracted values."""

    is_collection_matcher: ClassVar[bool] = True


def _type_of(value: Any) -> type | None:
    return None if value is None else type(value)


def _wrap(value_or_matcher: Any) -> Matcher:
    if isinstance(value_or_matcher, Matcher):
        return value_or_matcher
    return IsEqual(value_or_matcher)


class IsEqual(Matcher):
    def __init__(self, expected: Any):
        self.expected = expected
        self.value_type = _type_of(expected)

    def matches(self, candidate: Any) -> bool:
        return candidate == self.expected

    def describe(self) -> str:
        return describe_value(self.expected)


class OrderingComparison(Matcher):
    def __init__(self, value: Any, compare: Callable[[Any, Any], bool], phrase: str):
        self.value = value
        self.compare = compare
        self.phrase = phrase
        self.value_type = _type_of(value)

    def matches(self, candidate: Any) -> bool:
        try:
            return bool(self.compare(candidate, self.value))
        except TypeError:
            return False

    def describe(self) -> str:
        return f"{self.phrase} {describe_value(self.value)}"


class StringMatcher(Matcher):
    value_type = str

    def __init__(self, substring: str, test: Callable[[str, str], bool], phrase: str):
        self.substring = substring
        self.test = test
        self.phrase = phrase

    def matches(self, candidate: Any) -> bool:
        return isinstance(candidate, str) and self.test(candidate, self.substring)

    def describe(self) -> str:
        return f"a string {self.phrase} {describe_value(self.substring)}"


class IsNot(Matcher):
    def __init__(self, matcher: Matcher):
        self.matcher = matcher
        self.value_type = matcher.value_type

    @property
    def is_collection_matcher(self) -> bool:  # type: ignore[override]
        return self.matcher.is_collection_matcher

    def matches(self, candidate: Any) -> bool:
        return not self.matcher.matches(candidate)

    def describe(self) -> str:
        return f"not {self.matcher.describe()}"


class IsAnything(Matcher):
    def matches(self, candidate: Any) -> bool:
        return True

    def describe(self) -> str:
        return "ANYTHING"


class IsInstanceOf(Matcher):
    def __init__(self, expected_type: type):
        self.expected_type = expected_type

    def matches(self, candidate: Any) -> bool:
        return isinstance(candidate, self.expected_type)

    def describe(self) -> str:
        return f"an instance of {self.expected_type.__name__}"


class Combination(Matcher):
    def __init__(self, matchers: Iterable[Any], combine: Callable[[Iterable[bool]], bool], joiner: str):
        self.matchers = [_wrap(m) for m in matchers]
        self.combine = combine
        self.joiner = joiner
        types = {m.value_type for m in self.matchers}
        self.value_type = types.pop() if len(types) == 1 else None

    @property
    def is_collection_matcher(self) -> bool:  # type: ignore[override]
        return any(m.is_collection_matcher for m in self.matchers)

    def matches(self, candidate: Any) -> bool:
        return self.combine(m.matches(candidate) for m in self.matchers)

    def describe(self) -> str:
        return "(" + f" {self.joiner} ".join(m.describe() for m in self.matchers) + ")"


class HasItem(CollectionMatcher):
    def __init__(self, item: Any):
        self.item = _wrap(item)
        self.value_type = self.item.value_type

    def matches(self, candidate: Any) -> bool:
        return isinstance(candidate, Iterable) and any(self.item.matches(x) for x in candidate)

    def describe(self) -> str:
        return f"a collection containing {self.item.describe()}"


class HasItems(CollectionMatcher):
    def __init__(self, items: Iterable[Any]):
        self.items = [HasItem(item) for item in items]
        types = {m.value_type for m in self.items}
        self.value_type = types.pop() if len(types) == 1 else None

    def matches(self, candidate: Any) -> bool:
        candidate = list(candidate) if isinstance(candidate, Iterable) else candidate
        return all(m.matches(candidate) for m in self.items)

    def describe(self) -> str:
        return "(" + " and ".join(m.describe() for m in self.items) + ")"


class EveryItem(CollectionMatcher):
    def __init__(self, item: Any):
        self.item = _wrap(item)
        self.value_type = self.item.value_type

    def matches(self, candidate: Any) -> bool:
        return isinstance(candidate, Iterable) and all(self.item.matches(x) for x in candidate)

    def describe(self) -> str:
        return f"every item is {self.item.describe()}"


class HasSize(CollectionMatcher):
    def __init__(self, size: Any):
        self.size = _wrap(size)

    def matches(self, candidate: Any) -> bool:
        return isinstance(candidate, Sized) and self.size.matches(len(candidate))

    def describe(self) -> str:
        return f"a collection with size {self.size.describe()}"


class ContainsExactly(CollectionMatcher):
    def __init__(self, items: Iterable[Any]):
        self.items = [_wrap(item) for item in items]
        types = {m.value_type for m in self.items}
        self.value_type = types.pop() if len(types) == 1 else None

    def matches(self, candidate: Any) -> bool:
        if not isinstance(candidate, Iterable):
            return False
        values = list(candidate)
        return len(values) == len(self.items) and all(m.matches(v) for m, v in zip(self.items, values, strict=True))

    def describe(self) -> str:
        return "a collection containing [" + ", ".join(m.describe() for m in self.items) + "] in order"


class ForeignMatcher(Matcher):
    """Adapter for matcher objects from other libraries."""

    def __init__(self, matcher: Any, collection: bool = False):
        self.matcher = matcher
        self.collection = collection

    @property
    def is_collection_matcher(self) -> bool:  # type: ignore[override]
        return self.collection

    def matches(self, candidate: Any) -> bool:
        return bool(self.matcher.matches(candidate))

    def describe(self) -> str:
        return str(self.matcher)


class PredicateMatcher(Matcher):
    def __init__(self, predicate: Callable[[Any], bool], description: str | None = None):
        self.predicate = predicate
        self.description = description or getattr(predicate, "__name__", "a value satisfying a predicate")

    def matches(self, candidate: Any) -> bool:
        return bool(self.predicate(candidate))

    def describe(self) -> str:
        return self.description


def as_matcher(obj: Any) -> Matcher:
    """Adapt `obj` to a Matcher.

    Matchers pass through unchanged, objects with a `matches` method are wrapped
    and described by `str(obj)`, and plain callables become predicate matchers.
    """
    if isinstance(obj, Matcher):
        return obj
    if callable(getattr(obj, "matches", None)):
        return ForeignMatcher(obj)
    if callable(obj):
        return PredicateMatcher(obj)
    raise TypeError(f"Cannot use {type(obj).__name__} as a matcher")


def as_collection_matcher(obj: Any) -> Matcher:
    """Adapt a foreign matcher that expects the full list of extracted values."""
    if isinstance(obj, Matcher):
        if not obj.is_collection_matcher:
            raise TypeError(f"{obj!r} is not a collection matcher")
        return obj
    return ForeignMatcher(obj, collection=True)


def equal_to(expected: Any) -> Matcher:
    return IsEqual(expected)


def is_true() -> Matcher:
    return IsEqual(True)


def is_false() -> Matcher:
    return IsEqual(False)


def none() -> Matcher:
    return IsEqual(None)


def anything() -> Matcher:
    return IsAnything()


def instance_of(expected_type: type) -> Matcher:
    return IsInstanceOf(expected_type)


def not_(value_or_matcher: Any) -> Matcher:
    return IsNot(_wrap(value_or_matcher))


def greater_than(value: Any) -> Matcher:
    return OrderingComparison(value, operator.gt, "greater than")


def greater_than_or_equal_to(value: Any) -> Matcher:
    return OrderingComparison(value, operator.ge, "greater than or equal to")


def less_than(value: Any) -> Matcher:
    return OrderingComparison(value, operator.lt, "less than")


def less_than_or_equal_to(value: Any) -> Matcher:
    return OrderingComparison(value, operator.le, "less than or equal to")


def contains_string(substring: str) -> Matcher:
    return StringMatcher(substring, operator.contains, "containing")


def starts_with(prefix: str) -> Matcher:
    return StringMatcher(prefix, str.startswith, "starting with")


def ends_with(suffix: str) -> Matcher:
    return StringMatcher(suffix, str.endswith, "ending with")


def matches_regex(pattern: str) -> Matcher:
    return StringMatcher(pattern, lambda candidate, p: re.search(p, candidate) is not None, "matching the pattern")


def any_of(*matchers: Any) -> Matcher:
    return Combination(matchers, any, "or")


def all_of(*matchers: Any) -> Matcher:
    return Combination(matchers, all, "and")


def has_item(value_or_matcher: Any) -> Matcher:
    return HasItem(value_or_matcher)


def has_items(*values_or_matchers: Any) -> Matcher:
    return HasItems(values_or_matchers)


def every_item(value_or_matcher: Any) -> Matcher:
    return EveryItem(value_or_matcher)


def has_size(size: Any) -> Matcher:
    return HasSize(size)


def contains_exactly(*values_or_matchers: Any) -> Matcher:
    return ContainsExactly(values_or_matchers)

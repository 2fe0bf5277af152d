# Amenity filters as declarative predicates.
#
# A FeaturePredicate is pushed down to the record store as query parameters
# (PostgREST syntax for Supabase). The in-memory store evaluates the same
# description with `matches`, so both backends agree on what a filter means.

from dataclasses import dataclass
from typing import Any, List, Literal, Optional, Tuple, assert_never

from cafe_finder.core.errors import InvalidArgument
from cafe_finder.models.dto import FeatureKind

UNKNOWN_SENTINEL = "unknown"

Operator = Literal["not_null", "neq", "in", "ilike_contains"]

@dataclass(frozen=True)
class FieldCondition:
    field: str
    op: Operator
    value: Any = None

    def to_query_param(self) -> Tuple[str, str]:
        if self.op == "not_null":
            return self.field, "not.is.null"
        if self.op == "neq":
            return self.field, f"neq.{self.value}"
        if self.op == "in":
            return self.field, f"in.({','.join(self.value)})"
        if self.op == "ilike_contains":
            return self.field, f"ilike.*{self.value}*"
        raise ValueError(f"unsupported operator: {self.op}")

    def matches(self, record: Any) -> bool:
        actual = getattr(record, self.field, None)
        if self.op == "not_null":
            return actual is not None
        if self.op == "neq":
            return actual is not None and actual != self.value
        if self.op == "in":
            return actual in self.value
        if self.op == "ilike_contains":
            return isinstance(actual, str) and self.value.lower() in actual.lower()
        raise ValueError(f"unsupported operator: {self.op}")

@dataclass(frozen=True)
class FeaturePredicate:
    """Conjunction of field conditions describing one amenity filter."""
    feature: FeatureKind
    conditions: Tuple[FieldCondition, ...]

    def to_query_params(self) -> List[Tuple[str, str]]:
        return [condition.to_query_param() for condition in self.conditions]

    def matches(self, record: Any) -> bool:
        return all(condition.matches(record) for condition in self.conditions)

def _known_value(field: str) -> Tuple[FieldCondition, ...]:
    # Non-null, not the "unknown" sentinel, not empty
    return (
        FieldCondition(field, "not_null"),
        FieldCondition(field, "neq", UNKNOWN_SENTINEL),
        FieldCondition(field, "neq", ""),
    )

def feature_predicate(feature: FeatureKind) -> FeaturePredicate:
    match feature:
        case FeatureKind.WIFI:
            conditions = _known_value("ai_wifi_quality")
        case FeatureKind.OUTLETS:
            conditions = _known_value("ai_power_outlets")
        case FeatureKind.QUIET:
            conditions = (FieldCondition("ai_noise_level", "in", ("quiet", "moderate")),)
        case FeatureKind.NO_TIME_LIMIT:
            conditions = _known_value("ai_laptop_policy") + (
                FieldCondition("ai_laptop_policy", "ilike_contains", "unlimited"),
            )
        case _:
            assert_never(feature)
    return FeaturePredicate(feature=feature, conditions=conditions)

def parse_feature(raw: Optional[str], required: bool = False) -> Optional[FeatureKind]:
    """
    Maps a feature keyword to FeatureKind.

    An absent keyword means "no amenity filter" unless the endpoint requires one.
    """
    valid = ", ".join(kind.value for kind in FeatureKind)
    keyword = (raw or "").strip()
    if not keyword:
        if required:
            raise InvalidArgument("feature", f"feature must be one of: {valid}")
        return None
    try:
        return FeatureKind(keyword)
    except ValueError:
        raise InvalidArgument("feature", f"feature must be one of: {valid}") from None

"""
Variable Registry
=================

Static description of the clinical variable universe.

Each variable has an identifier, a value type and display metadata. The
registry is built once from the model artifact and never mutated.

Author: CSRE Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

from csre.engine.errors import MalformedArtifact


INTERCEPT_TERM = "(Intercept)"
BOOLEAN_TERM_SUFFIX = "TRUE"


class ValueType(str, Enum):
    """Value types a clinical variable can take."""
    BOOLEAN = "boolean"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class ClinicalVariable:
    """
    One clinical indicator variable.

    Labels and descriptions are keyed by language code ("fr", "en", ...).
    Numeric bounds are only meaningful for numeric variables.
    """
    id: str
    value_type: ValueType
    labels: Mapping[str, str] = field(default_factory=dict)
    descriptions: Mapping[str, str] = field(default_factory=dict)
    importance: Optional[int] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    step: Optional[float] = None

    @property
    def is_boolean(self) -> bool:
        return self.value_type is ValueType.BOOLEAN

    @property
    def term_name(self) -> str:
        """Name of the coefficient this variable contributes to a model."""
        if self.is_boolean:
            return f"{self.id}{BOOLEAN_TERM_SUFFIX}"
        return self.id

    def label(self, language: str = "en") -> str:
        """Display label, falling back to the identifier."""
        return self.labels.get(language) or self.id

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "valueType": self.value_type.value,
            "term": self.term_name,
            "labels": dict(self.labels),
            "descriptions": dict(self.descriptions),
            "importance": self.importance,
        }
        if not self.is_boolean:
            result["bounds"] = {
                "min": self.minimum,
                "max": self.maximum,
                "step": self.step,
            }
        return result


class VariableRegistry:
    """
    Ordered, read-only collection of the variable universe.

    Example:
        registry = VariableRegistry([
            ClinicalVariable("violence", ValueType.BOOLEAN),
            ClinicalVariable("work_disability_months", ValueType.NUMERIC),
        ])
        registry["violence"].term_name   # "violenceTRUE"
    """

    def __init__(self, variables: Iterable[ClinicalVariable]):
        ordered: List[ClinicalVariable] = list(variables)
        index: Dict[str, ClinicalVariable] = {}
        duplicates = []
        for variable in ordered:
            if variable.id in index:
                duplicates.append(variable.id)
            index[variable.id] = variable

        if duplicates:
            raise MalformedArtifact(
                [f"duplicate variable id '{vid}'" for vid in duplicates]
            )

        self._ordered: Tuple[ClinicalVariable, ...] = tuple(ordered)
        self._index = MappingProxyType(index)
        self._terms = MappingProxyType({v.term_name: v for v in ordered})

    def __getitem__(self, variable_id: str) -> ClinicalVariable:
        return self._index[variable_id]

    def __contains__(self, variable_id: object) -> bool:
        return variable_id in self._index

    def __iter__(self) -> Iterator[ClinicalVariable]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def get(self, variable_id: str) -> Optional[ClinicalVariable]:
        return self._index.get(variable_id)

    @property
    def ids(self) -> Tuple[str, ...]:
        """Variable identifiers in artifact order."""
        return tuple(v.id for v in self._ordered)

    @property
    def universe(self) -> FrozenSet[str]:
        return frozenset(self._index)

    def by_term(self, term: str) -> Optional[ClinicalVariable]:
        """Resolve a coefficient term name back to its variable."""
        return self._terms.get(term)

    def unknown(self, variable_ids: Iterable[str]) -> List[str]:
        """Return the identifiers that are not part of the universe."""
        return [vid for vid in variable_ids if vid not in self._index]

    def to_list(self) -> List[Dict[str, Any]]:
        return [v.to_dict() for v in self._ordered]

"""
Column type and role inference.

Decides which columns are numeric and which columns play the identifier and
category roles used by the chart builder.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence
from insightboard.core.config import get_settings
from insightboard.core.schemas import CellKind, CellValue, Dataset, classify_cell

logger = logging.getLogger(__name__)

NumericPolicy = Callable[[Sequence[CellValue]], bool]


def permissive_policy(values: Sequence[CellValue]) -> bool:
    """A single numeric-looking entry qualifies the whole column."""
    return any(classify_cell(v) is CellKind.NUMBER for v in values)


def majority_policy(values: Sequence[CellValue]) -> bool:
    """More than half of the non-empty entries must be numeric."""
    kinds = [classify_cell(v) for v in values]
    filled = [k for k in kinds if k is not CellKind.EMPTY]
    if not filled:
        return False
    numeric = sum(1 for k in filled if k is CellKind.NUMBER)
    return numeric * 2 > len(filled)


NUMERIC_POLICIES: Dict[str, NumericPolicy] = {
    "permissive": permissive_policy,
    "majority": majority_policy,
}


def get_numeric_policy(name: Optional[str] = None) -> NumericPolicy:
    """Resolve a policy by name, defaulting to the configured one."""
    policy_name = name or get_settings().numeric_policy
    try:
        return NUMERIC_POLICIES[policy_name]
    except KeyError:
        raise ValueError(f"Unknown numeric policy '{policy_name}'. Choose from {sorted(NUMERIC_POLICIES)}")


def infer_numeric_columns(dataset: Dataset, policy: Optional[NumericPolicy] = None) -> List[str]:
    """
    Return the numeric columns of a dataset, in column order.

    Under the default permissive policy a mixed column counts as numeric and
    its text entries are later treated as 0 in per-record totals.
    """
    policy = policy or get_numeric_policy()
    numeric = [col for col in dataset.columns if policy(dataset.column_values(col))]
    logger.debug(f"Numeric columns identified: {numeric}")
    return numeric


@dataclass(frozen=True)
class ColumnRule:
    """Match a lowercased column name by substring, or by equality when exact."""
    keyword: str
    exact: bool = False

    def matches(self, column: str) -> bool:
        name = column.lower()
        if self.exact:
            return name == self.keyword
        return self.keyword in name


def identifier_rules() -> List[ColumnRule]:
    settings = get_settings()
    rules = [ColumnRule(k) for k in settings.identifier_keyword_list]
    rules.extend(ColumnRule(k, exact=True) for k in settings.identifier_exact_keyword_list)
    return rules


def category_rules() -> List[ColumnRule]:
    return [ColumnRule(k) for k in get_settings().category_keyword_list]


def find_column(columns: Sequence[str], rules: Sequence[ColumnRule]) -> Optional[str]:
    """Return the first column (in column order) matched by any rule."""
    for column in columns:
        if any(rule.matches(column) for rule in rules):
            return column
    return None


def find_identifier_column(columns: Sequence[str], rules: Optional[Sequence[ColumnRule]] = None) -> Optional[str]:
    """Identifier column by name, falling back to the first column."""
    found = find_column(columns, identifier_rules() if rules is None else rules)
    if found is None and columns:
        return columns[0]
    return found


def find_category_column(columns: Sequence[str], rules: Optional[Sequence[ColumnRule]] = None) -> Optional[str]:
    return find_column(columns, category_rules() if rules is None else rules)

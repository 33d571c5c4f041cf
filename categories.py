from typing import Optional, Union

from rapidfuzz.distance import Levenshtein

from errors import LedgerValidationError
from models import ExpenseCategory


def parse_category(raw: Union[str, ExpenseCategory]) -> ExpenseCategory:
    """Normalise free text to a category tag.

    Matching is case-insensitive; a typo within one edit of exactly one tag is
    accepted. Anything else is rejected rather than filed under "Other".
    """
    if isinstance(raw, ExpenseCategory):
        return raw
    value = (raw or "").strip()
    if not value:
        raise LedgerValidationError("Category is required")

    lowered = value.lower()
    for category in ExpenseCategory:
        if category.value.lower() == lowered:
            return category

    best_distance: Optional[int] = None
    best: list[ExpenseCategory] = []
    for category in ExpenseCategory:
        dist = int(Levenshtein.distance(lowered, category.value.lower()))
        if best_distance is None or dist < best_distance:
            best_distance = dist
            best = [category]
        elif dist == best_distance:
            best.append(category)

    if best_distance is not None and best_distance <= 1:
        if len(best) > 1:
            options = ", ".join(sorted(c.value for c in best))
            raise LedgerValidationError(
                f"Category '{value}' is ambiguous; matches: {options}"
            )
        return best[0]
    raise LedgerValidationError(f"Unknown category '{value}'")

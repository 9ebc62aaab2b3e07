from typing import Any, List, Optional

from ..core.exceptions import ValidationError

MAX_PREFERENCES = 50
MAX_PREFERENCE_LENGTH = 100
MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 500


def validate_search_query(query: Optional[str]) -> None:
    if not query or not isinstance(query, str):
        raise ValidationError("Invalid search query", ["Search query is required and must be a string"])
    if not query.strip():
        raise ValidationError("Invalid search query", ["Search query cannot be empty"])
    if len(query.strip()) < MIN_QUERY_LENGTH:
        raise ValidationError("Invalid search query", [f"Search query must be at least {MIN_QUERY_LENGTH} characters"])
    if len(query) > MAX_QUERY_LENGTH:
        raise ValidationError(
            "Invalid search query", [f"Search query exceeds maximum length of {MAX_QUERY_LENGTH} characters"]
        )


def normalize_preferences(preferences: List[Any]) -> List[str]:
    """Validate preferences, then trim, lowercase and deduplicate them in order"""
    errors = []
    if len(preferences) > MAX_PREFERENCES:
        errors.append(f"Maximum {MAX_PREFERENCES} preferences allowed")

    for index, preference in enumerate(preferences):
        if not isinstance(preference, str):
            errors.append(f"Preference at index {index} must be a string")
        elif not preference.strip():
            errors.append(f"Preference at index {index} cannot be empty")
        elif len(preference) > MAX_PREFERENCE_LENGTH:
            errors.append(
                f"Preference at index {index} exceeds maximum length of {MAX_PREFERENCE_LENGTH} characters"
            )

    if errors:
        raise ValidationError("Validation failed", errors)

    normalized = list(dict.fromkeys(preference.strip().lower() for preference in preferences))
    if not normalized:
        raise ValidationError("At least one valid preference is required")
    return normalized

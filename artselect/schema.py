from typing import Any, List

REQUIRED_PAGINATION_FIELDS = ["current_page", "total_pages", "total"]


def _is_int(v: Any) -> bool:
    # bool is an int subclass but never a valid identity or page number
    return isinstance(v, int) and not isinstance(v, bool)


def validate_record(data: Any) -> List[str]:
    """
    Returns a list of validation error messages for one record item.
    Empty list means valid. Only the identity is checked; display
    fields are passed through untouched.
    """
    if not isinstance(data, dict):
        return [f"Record must be an object, got {type(data).__name__}"]
    if "id" not in data:
        return ["Missing required field: id"]
    if not _is_int(data["id"]):
        return ["Field 'id' must be an integer"]
    return []


def validate_page_payload(data: Any) -> List[str]:
    """
    Returns a list of validation error messages for a page response of
    shape ``{"data": [...], "pagination": {...}}``. Empty list means valid.
    """
    errors: List[str] = []

    if not isinstance(data, dict):
        return ["Response must be a JSON object"]

    items = data.get("data")
    if items is None:
        errors.append("Missing required field: data")
    elif not isinstance(items, list):
        errors.append("Field 'data' must be a list")
    else:
        for index, item in enumerate(items):
            for err in validate_record(item):
                errors.append(f"data[{index}]: {err}")

    pagination = data.get("pagination")
    if pagination is None:
        errors.append("Missing required field: pagination")
    elif not isinstance(pagination, dict):
        errors.append("Field 'pagination' must be an object")
    else:
        for f in REQUIRED_PAGINATION_FIELDS:
            if f not in pagination:
                errors.append(f"Missing required field: pagination.{f}")
            elif not _is_int(pagination[f]) or pagination[f] < 0:
                errors.append(f"Field 'pagination.{f}' must be a non-negative integer")

    return errors


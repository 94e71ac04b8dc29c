from typing import Any, Dict, Iterable


def mask_value(value: Any) -> Any:
    """Mask emails, phone numbers and long identifiers before they reach the logs."""
    if not isinstance(value, str):
        return value
    if "@" in value:  # email
        name, _, domain = value.partition("@")
        return (name[:2] + "***@" + domain) if name else "***@" + domain
    digits = [c for c in value if c.isdigit()]
    if len(digits) >= 7 and len(digits) >= len(value.replace(" ", "")) - 2:  # phone
        return "***" + "".join(digits[-2:])
    if len(value) > 12:
        return value[:4] + "..." + value[-4:]
    return value


def sanitize_payload(payload: Dict, allowed_keys: Iterable[str]) -> Dict:
    """Return a filtered copy of payload with only allowed keys and masked values."""
    result = {}
    for key in allowed_keys:
        if key in payload:
            result[key] = mask_value(payload[key])
    return result

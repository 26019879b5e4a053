"""
Wire-level conversions shared by every DirectAdmin accessor.

DirectAdmin speaks URL-encoded key/value bodies. Limits are either a
number or the literal word ``unlimited``; a limit of ``0`` is a real
limit and must never be confused with "no limit".
"""

import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union
from urllib.parse import parse_qs

UNLIMITED = "unlimited"

# Fields DirectAdmin pairs with a "u<field>=ON" switch for unlimited values
UNLIMITED_FIELDS = (
    "bandwidth",
    "domainptr",
    "ftp",
    "inode",
    "mysql",
    "nemailf",
    "nemailml",
    "nemailr",
    "nemails",
    "nsubdomains",
    "quota",
    "vdomains",
)

_ENTITY_RE = re.compile(r"&#([0-9]{2});?")


def to_limit(value: Any, cast: Callable[[float], Any] = float) -> Optional[Any]:
    """Convert a limit read from the server; ``None`` means unlimited."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == UNLIMITED:
        return None
    return cast(float(text))


def to_number(value: Any, cast: Callable[[float], Any] = float) -> Any:
    """Convert a usage reading; missing values read as zero."""
    if value is None or not str(value).strip():
        return cast(0)
    return cast(float(str(value).strip()))


def to_bool(value: Any, default: bool = False) -> bool:
    text = str(value).strip().lower() if value is not None else ""
    if text in ("on", "yes"):
        return True
    if text in ("off", "no"):
        return False
    return default


def on_off(flag: bool) -> str:
    return "ON" if flag else "OFF"


def process_unlimited_options(options: Mapping[str, Any]) -> Dict[str, Any]:
    """Rewrite ``None``/unlimited limits into the form DirectAdmin expects."""
    processed = dict(options)
    for field in UNLIMITED_FIELDS:
        switch = f"u{field}"
        processed.pop(switch, None)
        if field in processed and (
            processed[field] is None or str(processed[field]).lower() == UNLIMITED
        ):
            processed[field] = UNLIMITED
            processed[switch] = "ON"
    return processed


def encode_selection(names: Iterable[str], prefix: str = "select") -> Dict[str, str]:
    """Encode a batch selection as zero-indexed ``select0``, ``select1``, ... fields."""
    return {f"{prefix}{idx}": name for idx, name in enumerate(names)}


def parse_response(body: str) -> Union[Dict[str, Any], List[str]]:
    """Parse a URL-encoded DirectAdmin response body."""
    unescaped = _ENTITY_RE.sub(lambda match: chr(int(match.group(1))), body or "")
    parsed = parse_qs(unescaped, keep_blank_values=True)

    if len(parsed) == 1 and "list[]" in parsed:
        return parsed["list[]"]

    result: Dict[str, Any] = {}
    for key, values in parsed.items():
        if key.endswith("[]"):
            result[key[:-2]] = values
        else:
            result[key] = values[-1]
    return result


def response_to_dict(value: Any) -> Dict[str, Any]:
    """Parse a single embedded URL-encoded value, e.g. one domain's settings."""
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    parsed = parse_response(str(value))
    return parsed if isinstance(parsed, dict) else {}


def as_list(value: Any) -> List[Any]:
    # DirectAdmin answers an empty list with an empty body
    if not value:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, Mapping):
        return list(value.keys())
    return [value]

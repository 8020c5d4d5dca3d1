import json
from typing import Any


def dumps(msg: Any, compact: bool = True) -> str:
    """
    Serialize a message to a JSON string.

    Big integers are left as ints; callers that need string encoding (pool
    records) convert before serializing. Unknown objects fall back to str().

    Args:
        msg: The message to serialize
        compact: Drop whitespace between separators (one record per line)

    Returns:
        JSON string representation of the message
    """
    separators = (",", ":") if compact else None
    return json.dumps(msg, separators=separators, default=str)


def loads(data: Any) -> Any:
    """
    Deserialize a JSON string (or bytes) to a Python object.

    Args:
        data: JSON text to deserialize

    Returns:
        Python object from JSON string
    """
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8")
    return json.loads(data)


def ndjson_line(record: Any) -> str:
    """Encode one record as a newline-terminated JSON line."""
    return dumps(record) + "\n"

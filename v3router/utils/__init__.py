from .json_helpers import dumps, loads, ndjson_line

__all__ = ["dumps", "loads", "ndjson_line"]

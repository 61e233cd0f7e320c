"""Core output dispatcher and JSON projection."""

import json


def to_jsonable(data):
    """Project records (anything with to_dict) and lists of them to plain JSON types."""
    if hasattr(data, "to_dict"):
        return data.to_dict()
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {k: to_jsonable(v) for k, v in data.items()}
    return data


def pretty_print(data):
    print(json.dumps(to_jsonable(data), indent=2, ensure_ascii=False))


def output(data, formatter=None, fmt="table", plain_formatter=None):
    """Output data in the requested format: table, plain, or json."""
    if fmt == "plain" and plain_formatter:
        print(plain_formatter(data))
    elif fmt in ("table", "plain") and formatter:
        print(formatter(data))
    else:
        pretty_print(data)

from __future__ import annotations

import json

OUTPUT_FORMATS = ["json", "jsonl"]


def print_body(raw: bytes, *, output_format: str = "json") -> None:
    """Print a response body, formatting it when it is JSON.

    With jsonl, a top-level array is printed one element per line.
    """
    text = raw.decode("utf-8", errors="replace")
    try:
        body = json.loads(text)
    except ValueError:
        print(text)
        return
    if output_format == "jsonl" and isinstance(body, list):
        for item in body:
            print(json.dumps(item))
        return
    print(json.dumps(body, indent=2))

from __future__ import annotations

import argparse
import json
import sys
from functools import partial
from typing import Any

from relaykit.http import DEFAULT_CONFIG_PATH
from relaykit.http.cli._output import OUTPUT_FORMATS, print_body
from relaykit.http.config import TRANSPORTS, ClientConfig, load_client_config
from relaykit.http.manager import RequestManager
from relaykit.http.methods import method_from_name
from relaykit.http.request import RequestDescriptor
from relaykit.http.result import Result

COMMAND = "call"
METHODS = ["GET", "PUT", "POST", "DELETE", "HEAD"]


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    call_parser = subparsers.add_parser(
        COMMAND,
        help="Send one or more HTTP requests, at most --max-concurrent at a time",
    )
    call_parser.add_argument("urls", metavar="URL", nargs="+", help="Full URL to call (repeatable)")
    call_parser.add_argument(
        "-X",
        "--request",
        dest="method",
        default="GET",
        type=str.upper,
        choices=METHODS,
        metavar="METHOD",
        help=f"HTTP method ({', '.join(METHODS)}, default: GET)",
    )
    call_parser.add_argument("-d", "--data", help="Request body for PUT/POST (JSON string)")
    call_parser.add_argument(
        "-H",
        "--header",
        action="append",
        dest="headers",
        metavar="HDR",
        help="Header in 'Key: Value' format (repeatable)",
    )
    call_parser.add_argument(
        "-q",
        "--query",
        action="append",
        dest="query",
        metavar="KEY=VALUE",
        help="Query parameter for GET requests (repeatable, order is kept)",
    )
    call_parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds (default: 15)")
    call_parser.add_argument(
        "--expected-mime-type",
        help=(
            "Responses whose MIME type equals this one fail with BadMimeType "
            "(default: application/json, so JSON responses are rejected unless another type is given)"
        ),
    )
    call_parser.add_argument(
        "--log-failures",
        action="store_true",
        default=False,
        help="Log every fault observed on failed requests",
    )
    call_parser.add_argument("--max-concurrent", type=int, help="Maximum number of requests in flight")
    call_parser.add_argument("--transport", choices=TRANSPORTS, help="HTTP library used to send requests")
    call_parser.add_argument(
        "--config-file-path",
        default=DEFAULT_CONFIG_PATH,
        help=f"Config file path (default: {DEFAULT_CONFIG_PATH})",
    )
    call_parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default="json",
        help="Output format: json (default), jsonl (one array element per line)",
    )


def _parse_headers(raw: list[str] | None) -> dict[str, str] | None:
    if not raw:
        return None
    headers: dict[str, str] = {}
    for h in raw:
        if ": " not in h:
            raise ValueError(f"Invalid header format '{h}'. Expected 'Key: Value'.")
        key, value = h.split(": ", 1)
        headers[key] = value
    return headers


def _parse_query(raw: list[str] | None) -> list[tuple[str, str]]:
    items: list[tuple[str, str]] = []
    for q in raw or []:
        if "=" not in q:
            raise ValueError(f"Invalid query format '{q}'. Expected 'key=value'.")
        key, value = q.split("=", 1)
        items.append((key, value))
    return items


def _parse_body(raw: str | None, headers: dict[str, str]) -> Any:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON data: {e}") from e
    headers.setdefault("Content-Type", "application/json")
    return data


def _build_descriptors(parsed: argparse.Namespace, config: ClientConfig) -> list[RequestDescriptor]:
    headers = dict(config.headers)
    headers.update(_parse_headers(parsed.headers) or {})
    payload = _parse_body(parsed.data, headers)
    method = method_from_name(parsed.method, payload=payload, query_items=_parse_query(parsed.query))
    return [
        RequestDescriptor(
            url=url,
            method=method,
            headers=headers,
            timeout=parsed.timeout if parsed.timeout is not None else config.timeout,
            expected_mime_type=parsed.expected_mime_type or config.expected_mime_type,
            log_failures=parsed.log_failures or config.log_failures,
        )
        for url in parsed.urls
    ]


def run(parsed: argparse.Namespace) -> int:
    try:
        config = load_client_config(parsed.config_file_path)
        descriptors = _build_descriptors(parsed, config)
        manager = RequestManager(
            parsed.max_concurrent or config.max_concurrent,
            transport=parsed.transport or config.transport,
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    results: dict[int, Result] = {}
    with manager:
        for index, descriptor in enumerate(descriptors):
            manager.submit(descriptor, partial(results.__setitem__, index), result_type=bytes)

    exit_code = 0
    for index, descriptor in enumerate(descriptors):
        result = results[index]
        if len(descriptors) > 1:
            print(f"==> {descriptor.url} <==")
        if result.ok:
            print_body(result.value, output_format=parsed.output_format)
        else:
            print(f"Error: {descriptor.url}: {result.error}", file=sys.stderr)
            exit_code = 1
    return exit_code

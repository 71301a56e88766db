"""
Endpoint dispatcher: maps symbolic endpoint names to concrete HTTP requests.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence
from urllib.parse import quote, urlencode

from urllib3.filepost import encode_multipart_formdata

from common.errors import InvalidParameters
from configuration import (
    BATCH_FIELD_NAME,
    BATCH_FILENAME,
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    MULTIPART_BOUNDARY,
    ORDER_PATH,
    PRICE_CURRENCY,
    RESOURCE_PATH,
)

logger = logging.getLogger(__name__)


class RequestDescription(NamedTuple):
    """Method, path (with query string), headers and optional body of one request."""

    method: str
    path: str
    headers: Mapping[str, str]
    body: Optional[bytes] = None


def _require_count(endpoint: str, params: Sequence[str], expected: int, usage: str) -> None:
    if len(params) != expected:
        raise InvalidParameters(
            endpoint, f"expected {expected} parameter(s) ({usage}), got {len(params)}"
        )


def _require_at_least(endpoint: str, params: Sequence[str], minimum: int, usage: str) -> None:
    if len(params) < minimum:
        raise InvalidParameters(
            endpoint, f"expected at least {minimum} parameter(s) ({usage}), got {len(params)}"
        )


def _parse_id(endpoint: str, literal: str) -> int:
    # Digits only: rejects signs, whitespace and decimal points
    if not literal.isascii() or not literal.isdigit() or int(literal) <= 0:
        raise InvalidParameters(endpoint, f"id must be a positive integer, got {literal!r}")
    return int(literal)


def _parse_price(endpoint: str, literal: str) -> str:
    """Parse a decimal amount and render it as a money string, e.g. ``CNY 12.50``."""
    try:
        amount = Decimal(literal.strip())
    except InvalidOperation:
        raise InvalidParameters(
            endpoint, f"price must be a decimal amount, got {literal!r}"
        ) from None
    if not amount.is_finite():
        raise InvalidParameters(endpoint, f"price must be a finite amount, got {literal!r}")
    try:
        amount = amount.quantize(Decimal("0.01"))
    except InvalidOperation:
        raise InvalidParameters(endpoint, f"price out of range: {literal!r}") from None
    return f"{PRICE_CURRENCY} {amount}"


def _json_body(payload: dict) -> bytes:
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def _get_all(endpoint: str, params: Sequence[str]) -> RequestDescription:
    _require_count(endpoint, params, 0, "no parameters")
    return RequestDescription("GET", RESOURCE_PATH, {})


def _get_by_id(endpoint: str, params: Sequence[str]) -> RequestDescription:
    _require_count(endpoint, params, 1, "id")
    resource_id = _parse_id(endpoint, params[0])
    return RequestDescription("GET", f"{RESOURCE_PATH}/{resource_id}", {})


def _get_by_name(endpoint: str, params: Sequence[str]) -> RequestDescription:
    _require_count(endpoint, params, 1, "name")
    query = urlencode({"name": params[0]}, quote_via=quote)
    return RequestDescription("GET", f"{RESOURCE_PATH}?{query}", {})


def _post_json(endpoint: str, params: Sequence[str]) -> RequestDescription:
    _require_count(endpoint, params, 2, "name price")
    name, price = params[0], _parse_price(endpoint, params[1])
    return RequestDescription(
        "POST",
        RESOURCE_PATH,
        {"Content-Type": JSON_CONTENT_TYPE},
        _json_body({"name": name, "price": price}),
    )


def _post_form(endpoint: str, params: Sequence[str]) -> RequestDescription:
    _require_count(endpoint, params, 2, "name price")
    name, price = params[0], _parse_price(endpoint, params[1])
    body = urlencode({"name": name, "price": price}).encode("ascii")
    return RequestDescription("POST", RESOURCE_PATH, {"Content-Type": FORM_CONTENT_TYPE}, body)


def _post_batch(endpoint: str, params: Sequence[str]) -> RequestDescription:
    _require_at_least(endpoint, params, 1, "item1 item2 ...")
    content = "".join(f"{item}\n" for item in params)
    body, content_type = encode_multipart_formdata(
        {BATCH_FIELD_NAME: (BATCH_FILENAME, content, "text/plain")},
        boundary=MULTIPART_BOUNDARY,
    )
    return RequestDescription("POST", RESOURCE_PATH, {"Content-Type": content_type}, body)


def _get_order_by_id(endpoint: str, params: Sequence[str]) -> RequestDescription:
    _require_count(endpoint, params, 1, "id")
    order_id = _parse_id(endpoint, params[0])
    return RequestDescription("GET", f"{ORDER_PATH}/{order_id}", {})


def _post_order(endpoint: str, params: Sequence[str]) -> RequestDescription:
    _require_at_least(endpoint, params, 2, "customer item1,item2,...")
    customer = params[0]
    items: List[str] = [item for item in params[1].split(",") if item]
    if not items:
        raise InvalidParameters(endpoint, "order needs at least one item")
    return RequestDescription(
        "POST",
        ORDER_PATH,
        {"Content-Type": JSON_CONTENT_TYPE},
        _json_body({"customer": customer, "items": items}),
    )


ENDPOINTS: Dict[str, Callable[[str, Sequence[str]], RequestDescription]] = {
    "resource-get-all": _get_all,
    "resource-get-by-id": _get_by_id,
    "resource-get-by-name": _get_by_name,
    "resource-post-json": _post_json,
    "resource-post-form": _post_form,
    "resource-post-batch": _post_batch,
    "order-get-by-id": _get_order_by_id,
    "order-post": _post_order,
}

ENDPOINT_USAGE: Dict[str, str] = {
    "resource-get-all": "",
    "resource-get-by-id": "<id>",
    "resource-get-by-name": "<name>",
    "resource-post-json": "<name> <price>",
    "resource-post-form": "<name> <price>",
    "resource-post-batch": "<item1> <item2> ...",
    "order-get-by-id": "<id>",
    "order-post": "<customer> <item1>,<item2>,...",
}


def dispatch(endpoint: str, params: Sequence[str]) -> RequestDescription:
    """Build the request for ``endpoint`` with positional ``params``.

    Raises:
        InvalidParameters: unknown endpoint, wrong parameter count, or a
            literal that cannot be parsed for that endpoint
    """
    builder = ENDPOINTS.get(endpoint)
    if builder is None:
        raise InvalidParameters(endpoint, "unknown endpoint")
    return builder(endpoint, list(params))


def endpoint_help() -> str:
    """One line per endpoint, for CLI usage text."""
    return "\n".join(
        f"  {name} {usage}".rstrip() for name, usage in ENDPOINT_USAGE.items()
    )

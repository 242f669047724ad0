"""
Normalization of API response shapes.

The backend wraps most payloads as ``{"success", "data", "message"}`` but
not consistently: carts arrive as ``data.items``, ``data`` or a bare list,
orders sometimes as ``{"orders": [...]}``, and cart lines carry their
product under ``products``. Every tolerance for those variants lives here;
parsers fail closed (empty/default) instead of raising.
"""
from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def unwrap_data(payload: Any) -> Any:
    """Return ``payload["data"]`` for enveloped responses, else the payload."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def extract_items(payload: Any) -> list[Any]:
    data = unwrap_data(payload)
    if isinstance(data, dict) and isinstance(data.get("items"), list):
        return data["items"]
    if isinstance(data, list):
        return data
    return []


def normalize_cart_line(raw: Any) -> dict[str, Any] | None:
    if not isinstance(raw, dict) or not raw.get("id"):
        return None
    line = dict(raw)
    # Backend returns 'products' (plural) on list responses
    product = line.pop("products", None)
    if line.get("product") is None and product is not None:
        line["product"] = product
    return line


def extract_order(payload: Any) -> Any:
    data = unwrap_data(payload)
    if isinstance(data, dict) and isinstance(data.get("orders"), list):
        return data["orders"][0] if data["orders"] else None
    return data


def extract_page(payload: Any, key: str) -> tuple[list[Any], dict[str, Any]]:
    data = unwrap_data(payload)
    if isinstance(data, list):
        return data, {}
    if not isinstance(data, dict):
        return [], {}
    items = data.get(key)
    meta = data.get("pagination") or data.get("meta")
    if not isinstance(meta, dict) and isinstance(payload, dict):
        meta = payload.get("meta")
    return (items if isinstance(items, list) else []), (meta if isinstance(meta, dict) else {})


def parse_model(model: type[ModelT], raw: Any) -> ModelT | None:
    """Validate one entry, logging and returning None when it does not fit."""
    if raw is None:
        return None
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        logger.warning("Dropping malformed %s payload: %s", model.__name__, e.errors()[:3])
        return None


def parse_models(model: type[ModelT], raw_items: Any) -> list[ModelT]:
    if not isinstance(raw_items, list):
        return []
    parsed = (parse_model(model, raw) for raw in raw_items)
    return [item for item in parsed if item is not None]

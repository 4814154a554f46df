"""Extraction of the fields a field manager owns on a live object.

Server-side apply records ownership in ``metadata.managedFields`` using the
``FieldsV1`` format: ``f:<name>`` for map fields, ``k:<json>`` for list items
identified by their merge keys, ``v:<json>`` for set items and ``.`` for the
presence of the enclosing element. An empty mapping marks a leaf, whose whole
value is owned.
"""

from __future__ import annotations

import copy
import json
from typing import Any


def find_managed_fields(
    obj: dict[str, Any],
    field_manager: str,
    operation: str = "Apply",
    subresource: str = "",
) -> dict[str, Any] | None:
    """Return the FieldsV1 set recorded for a field manager, if any.

    Args:
        obj: Live object (camelCase API form)
        field_manager: Manager name used for the writes
        operation: Managed fields operation ("Apply" or "Update")
        subresource: Subresource the entry belongs to ("" for the main resource)

    Returns:
        FieldsV1 mapping, or None when the manager owns nothing
    """
    entries = (obj.get("metadata") or {}).get("managedFields") or []
    for entry in entries:
        if entry.get("manager") != field_manager:
            continue
        if entry.get("operation") != operation:
            continue
        if (entry.get("subresource") or "") != subresource:
            continue
        return entry.get("fieldsV1") or {}
    return None


def _list_item_matches(item: Any, key: str) -> bool:
    if key.startswith("k:"):
        if not isinstance(item, dict):
            return False
        selector = json.loads(key[2:])
        return all(item.get(name) == value for name, value in selector.items())
    if key.startswith("v:"):
        return item == json.loads(key[2:])
    return False


def extract_fields(value: Any, fields: dict[str, Any]) -> Any:
    """Project a value onto a FieldsV1 set.

    Args:
        value: Value to project
        fields: FieldsV1 mapping describing the owned subset of ``value``

    Returns:
        Copy of the owned subset, keeping the ordering of ``value``
    """
    if not fields:
        return copy.deepcopy(value)

    if isinstance(value, dict):
        result: dict[str, Any] = {}
        for key, sub_fields in fields.items():
            if not key.startswith("f:"):
                continue
            name = key[2:]
            if name in value:
                result[name] = extract_fields(value[name], sub_fields)
        return result

    if isinstance(value, list):
        items = []
        for item in value:
            for key, sub_fields in fields.items():
                if _list_item_matches(item, key):
                    items.append(extract_fields(item, sub_fields))
                    break
        return items

    return copy.deepcopy(value)


def extract_owned(obj: dict[str, Any], field_manager: str) -> dict[str, Any]:
    """Extract the apply configuration a field manager owns on an object.

    The identity fields (apiVersion, kind, name, namespace) are always set so
    the result can be compared directly with a desired apply configuration.

    Args:
        obj: Live object (camelCase API form)
        field_manager: Manager name used for server-side apply

    Returns:
        Owned subset of the object
    """
    fields = find_managed_fields(obj, field_manager)
    extracted: dict[str, Any] = {}
    if fields:
        extracted = extract_fields(obj, fields)

    meta = obj.get("metadata") or {}
    owned_meta = extracted.get("metadata") or {}
    owned_meta["name"] = meta.get("name")
    owned_meta["namespace"] = meta.get("namespace")

    extracted["apiVersion"] = obj.get("apiVersion")
    extracted["kind"] = obj.get("kind")
    extracted["metadata"] = owned_meta
    return extracted

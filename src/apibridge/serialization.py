# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
JSON/XML marshalling.

Bodies are always converted by going through bytes: ``marshal`` the source
object, then ``unmarshal`` into the caller's requested type. Target types are
``str``, ``bytes``, ``dict``, ``list``, ``object``/``None`` (whatever the
payload parses to) or a dataclass built from the parsed mapping.
"""

from __future__ import annotations

import dataclasses
import json
import xml.etree.ElementTree as ET
from typing import Any, Literal

from .errors import SerializationError

Format = Literal["json", "xml"]

XML_ROOT_TAG = "root"


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _xml_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _fill_element(element: ET.Element, value: Any) -> None:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    if isinstance(value, dict):
        for key, child_value in value.items():
            name = str(key)
            if name.startswith("@"):
                element.set(name[1:], _xml_text(child_value))
                continue
            items = child_value if isinstance(child_value, list) else [child_value]
            for item in items:
                _fill_element(ET.SubElement(element, name), item)
    elif value is not None:
        element.text = _xml_text(value)


def to_xml(value: Any, root_tag: str | None = None) -> str:
    """Render a mapping (or dataclass) as an XML fragment without a declaration."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        root_tag = root_tag or type(value).__name__
        value = dataclasses.asdict(value)
    if root_tag is None and isinstance(value, dict) and len(value) == 1:
        root_tag, value = next(iter(value.items()))
    root = ET.Element(str(root_tag or XML_ROOT_TAG))
    _fill_element(root, value)
    return ET.tostring(root, encoding="unicode")


def element_to_dict(element: ET.Element) -> Any:
    """Convert an element's content into plain Python data (namespaces dropped)."""
    children = list(element)
    if not children and not element.attrib:
        text = (element.text or "").strip()
        return text or None

    out: dict[str, Any] = {f"@{_local_name(key)}": value for key, value in element.attrib.items()}
    for child in children:
        name = _local_name(child.tag)
        value = element_to_dict(child)
        if name in out:
            existing = out[name]
            if not isinstance(existing, list):
                out[name] = existing = [existing]
            existing.append(value)
        else:
            out[name] = value
    text = (element.text or "").strip()
    if text and not children:
        out["#text"] = text
    return out


def from_xml(text: str) -> dict[str, Any]:
    root = ET.fromstring(text)
    return {_local_name(root.tag): element_to_dict(root)}


def marshal(value: Any, fmt: Format = "json") -> bytes:
    """Serialize ``value`` to bytes; str and bytes pass through untouched."""
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    try:
        if fmt == "xml":
            return to_xml(value).encode("utf-8")
        return json.dumps(value, default=_json_default).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Failed to marshal {type(value).__name__} as {fmt}: {exc}") from exc


def _coerce(parsed: Any, target_type: Any) -> Any:
    if target_type in (None, object, Any):
        return parsed
    if target_type is dict:
        if isinstance(parsed, dict):
            return parsed
        raise SerializationError(f"Expected an object, got {type(parsed).__name__}")
    if target_type is list:
        if isinstance(parsed, list):
            return parsed
        raise SerializationError(f"Expected an array, got {type(parsed).__name__}")
    if isinstance(target_type, type) and dataclasses.is_dataclass(target_type):
        if not isinstance(parsed, dict):
            raise SerializationError(f"Cannot build {target_type.__name__} from {type(parsed).__name__}")
        names = {f.name for f in dataclasses.fields(target_type)}
        try:
            return target_type(**{key: value for key, value in parsed.items() if key in names})
        except TypeError as exc:
            raise SerializationError(f"Cannot build {target_type.__name__}: {exc}") from exc
    if isinstance(target_type, type) and isinstance(parsed, target_type):
        return parsed
    raise SerializationError(f"Unsupported response type: {getattr(target_type, '__name__', target_type)!r}")


def unmarshal(data: bytes | str | None, target_type: Any = str, fmt: Format = "json") -> Any:
    """Deserialize ``data`` into ``target_type``; empty payloads become None."""
    if isinstance(data, str):
        raw = data.encode("utf-8")
    else:
        raw = bytes(data or b"")
    if target_type is bytes:
        return raw
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SerializationError(f"Response body is not valid UTF-8: {exc}") from exc
    if target_type is str:
        return text
    if not text.strip():
        return None
    try:
        parsed = from_xml(text) if fmt == "xml" else json.loads(text)
    except (ValueError, ET.ParseError) as exc:
        raise SerializationError(f"Failed to parse {fmt} body: {exc}") from exc
    if fmt == "xml" and target_type is not dict and isinstance(parsed, dict) and len(parsed) == 1:
        # Dataclass targets map onto the root element's children.
        inner = next(iter(parsed.values()))
        if isinstance(target_type, type) and dataclasses.is_dataclass(target_type) and isinstance(inner, dict):
            parsed = inner
    return _coerce(parsed, target_type)


def convert(value: Any, target_type: Any = str, fmt: Format = "json") -> Any:
    """Marshal ``value`` then unmarshal it as ``target_type``."""
    if value is None:
        return None
    return unmarshal(marshal(value, fmt), target_type, fmt)


__all__ = ["Format", "convert", "element_to_dict", "from_xml", "marshal", "to_xml", "unmarshal"]

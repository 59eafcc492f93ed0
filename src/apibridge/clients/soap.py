# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""SOAP 1.1 execution backend."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from ..errors import SerializationError
from ..http.headers import has_header
from ..http.models import HttpRequest, HttpResponse
from ..models.request import ApiRequest
from ..protocol import SOAP_BODY_MARKER, Protocol
from ..serialization import to_xml
from .base import ApiClient

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP_CONTENT_TYPE = "text/xml; charset=utf-8"


def build_envelope(body: Any) -> str:
    """
    Wrap ``body`` in a SOAP envelope.

    Strings are inserted verbatim; mappings and dataclasses are rendered as XML.
    """
    if body is None:
        payload = ""
    elif isinstance(body, bytes):
        payload = body.decode("utf-8")
    elif isinstance(body, str):
        payload = body
    else:
        try:
            payload = to_xml(body)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Failed to create SOAP envelope: {exc}") from exc
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<soap:Envelope xmlns:soap="{SOAP_ENV_NS}">'
        "<soap:Header/>"
        f"<soap:Body>{payload}</soap:Body>"
        "</soap:Envelope>"
    )


def extract_body(envelope: str) -> str | None:
    """Return the first element inside ``Body`` as XML text, the whole document when there is no Body."""
    try:
        root = ET.fromstring(envelope)
    except ET.ParseError as exc:
        raise SerializationError(f"Failed to parse SOAP response: {exc}") from exc
    for element in root.iter():
        if element.tag.rsplit("}", 1)[-1] == "Body":
            children = list(element)
            if not children:
                return None
            return ET.tostring(children[0], encoding="unicode")
    return envelope


class SoapApiClient(ApiClient):
    """POSTs an XML envelope with a SOAPAction header and parses the Body payload."""

    protocol = Protocol.SOAP
    body_format = "xml"

    def build_http_request(self, request: ApiRequest) -> HttpRequest:
        headers = dict(request.headers)
        if not has_header(headers, "Content-Type"):
            headers["Content-Type"] = SOAP_CONTENT_TYPE
        if not has_header(headers, "SOAPAction"):
            headers["SOAPAction"] = request.soap_action or ""
        body = request.body
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        if isinstance(body, str) and SOAP_BODY_MARKER in body:
            envelope = body
        else:
            envelope = build_envelope(body)
        return HttpRequest(url=request.url, method="POST", headers=headers, body=envelope.encode("utf-8"))

    def read_body(self, raw: HttpResponse, response_type: Any) -> Any:
        if response_type in (str, bytes):
            return self.decode(raw.content, response_type)
        if not raw.text.strip():
            return None
        return self.decode(extract_body(raw.text), response_type)


__all__ = ["SOAP_CONTENT_TYPE", "SOAP_ENV_NS", "SoapApiClient", "build_envelope", "extract_body"]

# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""apibridge CLI."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from ..config import ApiSettings, load_api_settings
from ..log import setup_logging
from ..models.request import ApiRequest
from ..models.response import ApiResponse
from ..protocol import Protocol, detect_protocol
from ..routing import ProfileRegistry, register_default_profiles
from ..service import ApiService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send a REST or SOAP request through apibridge transport profiles")
    parser.add_argument("url", help="Target URL")
    parser.add_argument("--method", default=None, help="HTTP method (default GET, or POST for SOAP)")
    parser.add_argument(
        "--header",
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Request header; may be repeated",
    )
    parser.add_argument("--data", default=None, help="Request body sent as-is")
    parser.add_argument("--soap-action", default=None, help="SOAPAction value; forces SOAP")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of human-friendly summary",
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Show the detected protocol and transport profile without sending",
    )
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    return parser


def _parse_headers(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Invalid header {raw!r}, expected NAME:VALUE")
        headers[name.strip()] = value.strip()
    return headers


def _print_json(data: dict[str, Any] | Any) -> None:
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    json.dump(payload, sys.stdout, indent=2, sort_keys=True, default=str)
    sys.stdout.write("\n")


def _pretty_print(response: ApiResponse[Any]) -> None:
    status = "OK" if response.success else "FAILED"
    print(f"[apibridge] {status} {response.status_code} {response.status_message or ''}".rstrip())
    print(f"Time: {response.response_time_ms}ms")
    if response.error_code:
        print(f"Error: {response.error_code}: {response.error_message}")
    if response.body not in (None, ""):
        print(response.body)


def explain(service: ApiService, request: ApiRequest) -> dict[str, Any]:
    protocol = detect_protocol(request)
    source, transport = service.registry.resolve(request.url)
    profile = service.registry.profile_for(transport)
    return {
        "url": request.url,
        "method": request.method,
        "protocol": protocol.value,
        "source": source,
        "profile": {
            "name": profile.name,
            "connect_timeout_ms": profile.connect_timeout_ms,
            "read_timeout_ms": profile.read_timeout_ms,
            "max_connections": profile.max_connections,
            "max_connections_per_route": profile.max_connections_per_route,
            "max_retry_attempts": profile.max_retry_attempts,
            "retry_delay_ms": profile.retry_delay_ms,
            "enable_logging": profile.enable_logging,
        },
    }


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    settings: ApiSettings = load_api_settings()
    if args.ignore_ssl_errors:
        settings.verify_ssl = False

    try:
        headers = _parse_headers(args.header)
        method = args.method or ("POST" if args.soap_action else "GET")
        request = ApiRequest(url=args.url, method=method, headers=headers, body=args.data, soap_action=args.soap_action)
    except ValueError as exc:
        parser.error(str(exc))

    registry = ProfileRegistry(settings)
    register_default_profiles(registry)

    with ApiService(settings, registry=registry) as service:
        if args.explain:
            report = explain(service, request)
            if args.json:
                _print_json(report)
            else:
                print(f"[apibridge] {report['protocol']} {report['method']} {report['url']}")
                print(f"Transport: {report['source']} (profile {report['profile']['name']})")
            return 0

        protocol = detect_protocol(request)
        if protocol is Protocol.SOAP:
            response = service.execute_soap(request)
        else:
            response = service.execute_rest(request)

    if args.json:
        _print_json(response)
    else:
        _pretty_print(response)

    return 0 if response.success else 1


if __name__ == "__main__":
    raise SystemExit(main())

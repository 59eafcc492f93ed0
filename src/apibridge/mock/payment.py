# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Payment gateway simulator."""

from __future__ import annotations

import itertools
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any

from ..errors import SerializationError
from ..models.request import ApiRequest
from ..models.response import ApiResponse, is_success_status
from ..serialization import convert
from .registry import CustomApiMock

logger = logging.getLogger(__name__)

PAYMENT_BASE_URL = "https://payment.gateway.com"
GATEWAY_HEADER_VALUE = "Mock-Gateway-v2.0"
INITIAL_TRANSACTION_ID = 1000
DEFAULT_AMOUNT = 100.0

INVALID_CARD_NUMBER = "4000000000000002"
EXPIRED_CARD_NUMBER = "4000000000000069"


@dataclass(frozen=True)
class PaymentScenario:
    name: str
    status_code: int
    delay_ms: int = 0
    error_code: str | None = None
    error_message: str | None = None


def _body_fields(body: Any) -> dict[str, Any]:
    if isinstance(body, dict):
        return body
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            parsed = json.loads(body)
        except ValueError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def _amount(fields: dict[str, Any]) -> float | None:
    try:
        return float(fields["amount"])
    except (KeyError, TypeError, ValueError):
        return None


class PaymentApiMock(CustomApiMock):
    """
    Answers everything under ``https://payment.gateway.com``.

    The ``X-Mock-Scenario`` header picks a scenario by name. Without it the
    JSON body decides: amount 1 is declined for insufficient funds, the two
    well-known test card numbers are invalid/expired, amount 999999 times out
    at the gateway and ``"test": "slow"`` succeeds after three seconds.
    """

    identifier = "payment-api"

    def __init__(self) -> None:
        self.scenarios: dict[str, PaymentScenario] = {}
        self._lock = threading.Lock()
        self._transactions = itertools.count(INITIAL_TRANSACTION_ID + 1)
        super().__init__()

    def matches_url(self, url: str) -> bool:
        return PAYMENT_BASE_URL in url

    def setup_scenarios(self) -> None:
        for scenario in (
            PaymentScenario("process_success", 200),
            PaymentScenario("process_slow", 200, 3000),
            PaymentScenario("insufficient_funds", 400, 100, "INSUFFICIENT_FUNDS", "Insufficient funds in account"),
            PaymentScenario("invalid_card", 400, 50, "INVALID_CARD", "Invalid card number"),
            PaymentScenario("expired_card", 400, 50, "EXPIRED_CARD", "Card has expired"),
            PaymentScenario("network_timeout", 504, 5000, "GATEWAY_TIMEOUT", "Payment gateway timeout"),
            PaymentScenario("service_unavailable", 503, 100, "SERVICE_UNAVAILABLE", "Payment service temporarily unavailable"),
            PaymentScenario("rate_limit", 429, 100, "RATE_LIMIT_EXCEEDED", "Too many payment requests"),
        ):
            self.scenarios[scenario.name] = scenario
        logger.info("Payment API mock scenarios ready: %s", ", ".join(self.scenarios))

    def reset(self) -> None:
        with self._lock:
            self._transactions = itertools.count(INITIAL_TRANSACTION_ID + 1)
        logger.info("Payment API mock state reset")

    def determine_scenario(self, request: ApiRequest) -> PaymentScenario:
        hint = self.scenario_hint(request)
        if hint and hint in self.scenarios:
            return self.scenarios[hint]

        fields = _body_fields(request.body)
        amount = _amount(fields)
        card = str(fields.get("cardNumber", ""))
        if amount == 1:
            return self.scenarios["insufficient_funds"]
        if card == INVALID_CARD_NUMBER:
            return self.scenarios["invalid_card"]
        if card == EXPIRED_CARD_NUMBER:
            return self.scenarios["expired_card"]
        if amount == 999999:
            return self.scenarios["network_timeout"]
        if fields.get("test") == "slow":
            return self.scenarios["process_slow"]
        return self.scenarios["process_success"]

    def execute(self, request: ApiRequest, response_type: Any = str) -> ApiResponse[Any]:
        scenario = self.determine_scenario(request)
        endpoint = request.url.replace(PAYMENT_BASE_URL, "", 1)
        logger.debug("Payment API mock executing scenario %s for endpoint %s", scenario.name, endpoint)

        self.simulate_delay(scenario.delay_ms)
        with self._lock:
            transaction_id = next(self._transactions)

        response: ApiResponse[Any] = ApiResponse(status_code=scenario.status_code)
        response.set_response_time(scenario.delay_ms)
        try:
            response.body = convert(self._body_for(scenario, request, transaction_id), response_type)
        except SerializationError as exc:
            response.mark_as_error("PAYMENT_MOCK_ERROR", f"Failed to create mock response: {exc}")

        response.headers["X-Payment-Gateway"] = GATEWAY_HEADER_VALUE
        response.headers["X-Transaction-Id"] = str(transaction_id)

        if not is_success_status(scenario.status_code):
            response.mark_as_error(scenario.error_code, scenario.error_message or "Payment failed")
        return response

    def _body_for(self, scenario: PaymentScenario, request: ApiRequest, transaction_id: int) -> dict[str, Any]:
        timestamp = int(time.time() * 1000)
        if is_success_status(scenario.status_code):
            amount = _amount(_body_fields(request.body))
            return {
                "transactionId": f"txn_{transaction_id}",
                "status": "completed",
                "amount": DEFAULT_AMOUNT if amount is None else amount,
                "currency": "USD",
                "timestamp": timestamp,
                "message": "Payment processed successfully",
            }
        body: dict[str, Any] = {
            "error": scenario.error_code,
            "message": scenario.error_message,
            "timestamp": timestamp,
        }
        if scenario.status_code == 429:
            body["retryAfter"] = 60
        return body


__all__ = ["PaymentApiMock", "PaymentScenario"]

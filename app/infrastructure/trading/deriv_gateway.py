"""
Adapter: Deriv WebSocket API.

Implements the BrokerGateway port with short-lived connections to the
Deriv API. Each public call opens one socket, performs a fixed sequence
of JSON request/response exchanges and closes it. There is no retry:
a call either completes within its timeout or raises.
"""

import itertools
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from websockets.exceptions import WebSocketException
from websockets.sync.client import ClientConnection, connect

from app.domain.trading.entities import (
    AccountBalance,
    BrokerAccount,
    BrokerAuthorization,
    Candle,
    ContractOrder,
    ContractReceipt,
)
from app.domain.trading.errors import (
    BrokerAuthorizationError,
    BrokerError,
    BrokerTimeoutError,
)
from app.domain.trading.instruments import round_price, to_broker_symbol
from app.domain.trading.ports import BrokerGateway
from app.shared.logging import mask_secret

logger = logging.getLogger(__name__)

DEFAULT_CANDLE_COUNT = 120
DEFAULT_GRANULARITY_SECONDS = 60


class _Exchange:
    """One open socket plus the deadline shared by all its requests."""

    def __init__(self, ws: ClientConnection, operation: str, timeout: float) -> None:
        self._ws = ws
        self._operation = operation
        self._timeout = timeout
        self._deadline = time.monotonic() + timeout
        self._req_ids = itertools.count(1)

    def request(
        self,
        payload: dict[str, Any],
        msg_type: str,
        error_cls: type[BrokerError] = BrokerError,
    ) -> dict[str, Any]:
        """Send ``payload`` and wait for the matching reply.

        Replies to other requests (e.g. subscription ticks) are skipped.
        """
        req_id = next(self._req_ids)
        self._ws.send(json.dumps({**payload, "req_id": req_id}))
        while True:
            remaining = self._deadline - time.monotonic()
            if remaining <= 0:
                raise BrokerTimeoutError(self._operation, self._timeout)
            try:
                raw = self._ws.recv(timeout=remaining)
            except TimeoutError as exc:
                raise BrokerTimeoutError(self._operation, self._timeout) from exc
            message = json.loads(raw)
            if message.get("req_id") != req_id:
                continue
            error = message.get("error")
            if error:
                raise error_cls(error.get("message", "Unknown broker error"), code=error.get("code"))
            if message.get("msg_type") == msg_type:
                return message

    def authorize(self, token: str) -> dict[str, Any]:
        message = self.request({"authorize": token}, "authorize", BrokerAuthorizationError)
        return message["authorize"]


def _parse_account(raw: dict[str, Any]) -> BrokerAccount:
    balance = raw.get("balance")
    return BrokerAccount(
        loginid=raw["loginid"],
        is_virtual=bool(raw.get("is_virtual")),
        currency=raw.get("currency"),
        balance=float(balance) if balance is not None else None,
    )


def _parse_authorization(raw: dict[str, Any]) -> BrokerAuthorization:
    balance = raw.get("balance")
    user_id = raw.get("user_id")
    return BrokerAuthorization(
        loginid=raw["loginid"],
        user_id=str(user_id) if user_id is not None else None,
        email=raw.get("email"),
        fullname=raw.get("fullname") or None,
        balance=float(balance) if balance is not None else None,
        currency=raw.get("currency"),
        is_virtual=bool(raw.get("is_virtual")),
        accounts=tuple(_parse_account(item) for item in raw.get("account_list", [])),
    )


class DerivGateway(BrokerGateway):
    """BrokerGateway backed by the Deriv WebSocket API.

    Args:
        endpoint: Full WebSocket URL including ``app_id``.
        request_timeout: Budget in seconds for read-only calls.
        trade_timeout: Budget in seconds for the whole purchase sequence.
        connector: Factory returning a sync websocket connection; tests
            substitute a fake.
    """

    def __init__(
        self,
        endpoint: str,
        request_timeout: float = 10.0,
        trade_timeout: float = 15.0,
        connector: Callable[..., ClientConnection] = connect,
    ) -> None:
        self._endpoint = endpoint
        self._request_timeout = request_timeout
        self._trade_timeout = trade_timeout
        self._connector = connector

    def _run(self, operation: str, timeout: float, steps: Callable[[_Exchange], Any]) -> Any:
        try:
            with self._connector(
                self._endpoint, open_timeout=timeout, close_timeout=1
            ) as ws:
                return steps(_Exchange(ws, operation, timeout))
        except TimeoutError as exc:
            raise BrokerTimeoutError(operation, timeout) from exc
        except (OSError, WebSocketException) as exc:
            logger.error("Broker connection failed during %s: %s", operation, type(exc).__name__)
            raise BrokerError(f"Could not reach broker: {exc}") from exc

    def authorize(self, token: str) -> BrokerAuthorization:
        logger.info("Authorizing broker token %s", mask_secret(token))
        raw = self._run(
            "authorize", self._request_timeout, lambda ex: ex.authorize(token)
        )
        return _parse_authorization(raw)

    def get_account_list(self, token: str) -> list[BrokerAccount]:
        def steps(ex: _Exchange) -> list[dict]:
            ex.authorize(token)
            return ex.request({"account_list": 1}, "account_list")["account_list"]

        return [_parse_account(item) for item in self._run("account_list", self._request_timeout, steps)]

    def get_account_settings(self, token: str) -> dict:
        def steps(ex: _Exchange) -> dict:
            ex.authorize(token)
            return ex.request({"get_settings": 1}, "get_settings")["get_settings"]

        return self._run("get_settings", self._request_timeout, steps)

    def get_balance(self, token: str, account_id: str) -> AccountBalance:
        def steps(ex: _Exchange) -> dict:
            ex.authorize(token)
            return ex.request({"balance": 1, "account": account_id}, "balance")["balance"]

        raw = self._run("balance", self._request_timeout, steps)
        return AccountBalance(
            loginid=raw.get("loginid", account_id),
            balance=float(raw["balance"]),
            currency=raw.get("currency", "USD"),
        )

    def get_candles(
        self,
        instrument: str,
        count: int = DEFAULT_CANDLE_COUNT,
        granularity: int = DEFAULT_GRANULARITY_SECONDS,
    ) -> list[Candle]:
        payload = {
            "ticks_history": to_broker_symbol(instrument),
            "adjust_start_time": 1,
            "count": count,
            "end": "latest",
            "start": 1,
            "style": "candles",
            "granularity": granularity,
        }
        raw = self._run(
            "ticks_history",
            self._request_timeout,
            lambda ex: ex.request(payload, "candles")["candles"],
        )
        return [
            Candle(
                time=datetime.fromtimestamp(item["epoch"], tz=timezone.utc),
                open=round_price(instrument, float(item["open"])),
                high=round_price(instrument, float(item["high"])),
                low=round_price(instrument, float(item["low"])),
                close=round_price(instrument, float(item["close"])),
                epoch=int(item["epoch"]),
            )
            for item in raw
        ]

    def place_trade(self, token: str, order: ContractOrder) -> ContractReceipt:
        def steps(ex: _Exchange) -> ContractReceipt:
            ex.authorize(token)
            proposal_msg = ex.request(
                {
                    "proposal": 1,
                    "subscribe": 1,
                    "amount": order.amount,
                    "basis": order.basis,
                    "contract_type": order.contract_type.value,
                    "currency": order.currency,
                    "duration": order.duration,
                    "duration_unit": order.duration_unit,
                    "symbol": order.symbol,
                },
                "proposal",
            )
            proposal = proposal_msg["proposal"]
            subscription: Optional[dict] = proposal_msg.get("subscription")
            if subscription and subscription.get("id"):
                ex.request({"forget": subscription["id"]}, "forget")
            if not proposal.get("id") or proposal.get("spot") is None:
                raise BrokerError("Invalid proposal response: missing id or spot")
            bought = ex.request({"buy": proposal["id"], "price": order.amount}, "buy")["buy"]
            return ContractReceipt(
                contract_id=int(bought["contract_id"]),
                buy_price=float(bought["buy_price"]),
                longcode=bought.get("longcode", ""),
                entry_spot=float(proposal["spot"]),
            )

        logger.info(
            "Placing %s %s on %s for %.2f %s",
            order.contract_type.value,
            f"{order.duration}{order.duration_unit}",
            order.symbol,
            order.amount,
            order.currency,
        )
        return self._run("buy", self._trade_timeout, steps)

"""
Tests for the trading and market API endpoints.

Ledger routes run end to end against the in-memory database. Market
routes that reach the broker use overridden use cases.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from app.domain.trading.entities import Candle, IndicatorSnapshot, MacdValue
from app.domain.trading.errors import BrokerError
from app.interfaces.trading.dependencies import get_candles_use_case, get_indicators_use_case

API = "/api/v1"


def _user_id(client, headers) -> str:
    return client.get(f"{API}/user/profile", headers=headers).json()["id"]


def _create(client, headers, **overrides):
    payload = {
        "userId": _user_id(client, headers),
        "symbol": "EUR/USD",
        "type": "buy",
        "amount": 10,
        "price": 1.1,
    }
    payload.update(overrides)
    return client.post(f"{API}/trades", json=payload, headers=headers)


# ══════════════════════════════════════════════════════════════
# Ledger
# ══════════════════════════════════════════════════════════════


class TestCreateTrade:
    """Tests for POST /trades and POST /trades/record."""

    def test_creates_open_trade(self, client, login_as) -> None:
        response = _create(client, login_as())
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "open"
        assert body["totalValue"] == 11.0

    def test_requires_session(self, client) -> None:
        response = client.post(
            f"{API}/trades",
            json={"userId": "x", "symbol": "EUR/USD", "type": "buy", "amount": 1, "price": 1},
        )
        assert response.status_code == 401

    def test_unknown_owner(self, client, login_as) -> None:
        response = _create(client, login_as(), userId="ghost")
        assert response.status_code == 400
        assert response.json()["error"] == "Unknown user"

    def test_non_positive_amount_is_422(self, client, login_as) -> None:
        assert _create(client, login_as(), amount=0).status_code == 422

    def test_record_broker_contract(self, client, login_as) -> None:
        response = client.post(
            f"{API}/trades/record",
            json={
                "symbol": "R_100",
                "contractType": "PUT",
                "stakeAmount": 5,
                "entryPrice": 1234.5,
                "derivContractId": 321,
                "derivAccountId": "VRTC1",
                "accountType": "demo",
            },
            headers=login_as(),
        )
        assert response.status_code == 201
        assert response.json()["derivContractId"] == 321
        assert response.json()["totalValue"] == 5.0


class TestCloseAndSettle:
    """Tests for closing ledger trades and settling broker contracts."""

    def test_close_updates_summary(self, client, login_as) -> None:
        headers = login_as()
        trade_id = _create(client, headers).json()["id"]

        closed = client.post(f"{API}/trades/{trade_id}/close", json={"exitPrice": 1.2}, headers=headers)
        assert closed.status_code == 200
        assert closed.json()["status"] == "closed"
        assert abs(closed.json()["profit"] - 1.0) < 1e-9

        summary = client.get(f"{API}/trades/profit-summary", headers=headers).json()
        assert summary["totalTrades"] == 1
        assert summary["winningTrades"] == 1
        assert summary["winRate"] == 100.0

    def test_close_twice(self, client, login_as) -> None:
        headers = login_as()
        trade_id = _create(client, headers).json()["id"]
        client.post(f"{API}/trades/{trade_id}/close", json={"exitPrice": 1.2}, headers=headers)
        response = client.post(f"{API}/trades/{trade_id}/close", json={"exitPrice": 1.3}, headers=headers)
        assert response.status_code == 400

    def test_close_without_price_or_pnl(self, client, login_as) -> None:
        headers = login_as()
        trade_id = _create(client, headers).json()["id"]
        response = client.post(f"{API}/trades/{trade_id}/close", json={"metadata": {}}, headers=headers)
        assert response.status_code == 400

    def test_close_unknown_trade(self, client, login_as) -> None:
        response = client.post(f"{API}/trades/nope/close", json={"exitPrice": 1.0}, headers=login_as())
        assert response.status_code == 404

    def test_settle_by_contract(self, client, login_as) -> None:
        headers = login_as()
        _create(client, headers, derivContractId=555, type="CALL")
        response = client.post(
            f"{API}/trades/settle-deriv-trade",
            json={"derivContractId": 555, "finalStatus": "won", "pnl": 8.5, "exitPrice": 1.15},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "won"
        assert response.json()["pnl"] == 8.5

    def test_settle_unknown_contract(self, client, login_as) -> None:
        response = client.post(
            f"{API}/trades/settle-deriv-trade",
            json={"derivContractId": 1, "finalStatus": "won", "pnl": 1},
            headers=login_as(),
        )
        assert response.status_code == 404


class TestReports:
    def test_history_is_per_user(self, client, login_as) -> None:
        alice = login_as("alice@example.com")
        bob = login_as("bob@example.com")
        _create(client, alice)
        _create(client, alice, symbol="BTC/USD")

        assert len(client.get(f"{API}/trades/history", headers=alice).json()) == 2
        assert client.get(f"{API}/trades/history", headers=bob).json() == []

    def test_empty_profit_summary(self, client, login_as) -> None:
        summary = client.get(f"{API}/trades/profit-summary", headers=login_as()).json()
        assert summary["totalTrades"] == 0
        assert summary["lastUpdated"] is None


# ══════════════════════════════════════════════════════════════
# Market data
# ══════════════════════════════════════════════════════════════


class TestMarketEndpoints:
    def test_instruments(self, client) -> None:
        instruments = client.get(f"{API}/market/instruments").json()
        eur = next(i for i in instruments if i["name"] == "EUR/USD")
        assert eur == {"name": "EUR/USD", "label": "EUR/USD", "type": "Forex", "decimalPlaces": 5}

    def test_status_of_slash_instrument(self, client) -> None:
        body = client.get(f"{API}/market/status/BTC/USD").json()
        assert body["instrument"] == "BTC/USD"
        assert body["isOpen"] is True

    def test_candles(self, client) -> None:
        use_case = MagicMock()
        use_case.execute.return_value = [
            Candle(datetime(2024, 5, 15, 12, tzinfo=timezone.utc), 1.0, 1.2, 0.9, 1.1, 1715774400)
        ]
        client.app.dependency_overrides[get_candles_use_case] = lambda: use_case

        response = client.get(f"{API}/market/candles/EUR/USD", params={"count": 10})

        assert response.status_code == 200
        assert response.json()[0]["close"] == 1.1
        use_case.execute.assert_called_once_with("EUR/USD", count=10, granularity=60)

    def test_candles_broker_failure(self, client) -> None:
        use_case = MagicMock()
        use_case.execute.side_effect = BrokerError("Unknown symbol")
        client.app.dependency_overrides[get_candles_use_case] = lambda: use_case
        response = client.get(f"{API}/market/candles/EUR/USD")
        assert response.status_code == 502
        assert response.json()["detail"] == "Unknown symbol"

    def test_indicators_omit_missing_values(self, client) -> None:
        use_case = MagicMock()
        use_case.execute.return_value = IndicatorSnapshot(rsi=48.2, macd=MacdValue(0.1, 0.2, -0.1))
        client.app.dependency_overrides[get_indicators_use_case] = lambda: use_case

        body = client.get(f"{API}/market/indicators/EUR/USD").json()

        assert body == {"rsi": 48.2, "macd": {"macd": 0.1, "signal": 0.2, "histogram": -0.1}}

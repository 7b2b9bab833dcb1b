"""
Adapter: Trade ledger repository.

Implements TradeRepository port.
Responsible for persisting and retrieving trades from the ``trades`` table.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine

from app.domain.accounts.entities import AccountType
from app.domain.trading.entities import Trade, TradeStatus
from app.domain.trading.ports import TradeRepository
from app.infrastructure.persistence.database import as_utc
from app.infrastructure.persistence.tables import trades

logger = logging.getLogger(__name__)

_MUTABLE_COLUMNS = (
    "status",
    "close_time",
    "profit",
    "metadata",
    "pnl",
    "exit_price",
    "stop_loss",
)


def _to_row(trade: Trade) -> dict[str, Any]:
    return {
        "id": trade.id,
        "user_id": trade.user_id,
        "symbol": trade.symbol,
        "type": trade.type,
        "amount": trade.amount,
        "price": trade.price,
        "total_value": trade.total_value,
        "status": trade.status.value,
        "open_time": trade.open_time,
        "close_time": trade.close_time,
        "profit": trade.profit,
        "metadata": dict(trade.metadata),
        "account_type": trade.account_type.value if trade.account_type else None,
        "deriv_account_id": trade.deriv_account_id,
        "deriv_contract_id": trade.deriv_contract_id,
        "ai_strategy_id": trade.ai_strategy_id,
        "duration_seconds": trade.duration_seconds,
        "stop_loss": trade.stop_loss,
        "pnl": trade.pnl,
        "exit_price": trade.exit_price,
    }


def _to_entity(row) -> Trade:
    return Trade(
        id=row.id,
        user_id=row.user_id,
        symbol=row.symbol,
        type=row.type,
        amount=row.amount,
        price=row.price,
        total_value=row.total_value,
        status=TradeStatus(row.status),
        open_time=as_utc(row.open_time),
        close_time=as_utc(row.close_time),
        profit=row.profit,
        metadata=dict(row.metadata or {}),
        account_type=AccountType(row.account_type) if row.account_type else None,
        deriv_account_id=row.deriv_account_id,
        deriv_contract_id=row.deriv_contract_id,
        ai_strategy_id=row.ai_strategy_id,
        duration_seconds=row.duration_seconds,
        stop_loss=row.stop_loss,
        pnl=row.pnl,
        exit_price=row.exit_price,
    )


class SqlTradeRepository(TradeRepository):
    """SQL implementation of the trade ledger."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, trade: Trade) -> Trade:
        with self._engine.begin() as conn:
            conn.execute(insert(trades).values(**_to_row(trade)))
        logger.debug("Inserted trade %s for user %s", trade.id, trade.user_id)
        return trade

    def _fetch_one(self, where) -> Optional[Trade]:
        with self._engine.connect() as conn:
            row = conn.execute(select(trades).where(where)).first()
        return _to_entity(row) if row is not None else None

    def get(self, trade_id: str) -> Optional[Trade]:
        return self._fetch_one(trades.c.id == trade_id)

    def get_by_contract_id(self, contract_id: int) -> Optional[Trade]:
        return self._fetch_one(trades.c.deriv_contract_id == contract_id)

    def update(self, trade: Trade) -> Trade:
        row = _to_row(trade)
        values = {column: row[column] for column in _MUTABLE_COLUMNS}
        with self._engine.begin() as conn:
            conn.execute(update(trades).where(trades.c.id == trade.id).values(**values))
        return trade

    def list_for_user(self, user_id: str) -> list[Trade]:
        query = (
            select(trades)
            .where(trades.c.user_id == user_id)
            .order_by(trades.c.open_time.desc())
        )
        with self._engine.connect() as conn:
            return [_to_entity(row) for row in conn.execute(query)]

    def list_closed(
        self, user_id: str, since: Optional[datetime] = None
    ) -> list[Trade]:
        query = select(trades).where(
            trades.c.user_id == user_id,
            trades.c.status == TradeStatus.CLOSED.value,
        )
        if since is not None:
            query = query.where(trades.c.close_time >= since)
        query = query.order_by(trades.c.close_time.desc())
        with self._engine.connect() as conn:
            return [_to_entity(row) for row in conn.execute(query)]

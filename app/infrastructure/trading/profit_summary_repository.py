"""
Adapter: Profit summary repository.

One row per user in ``profit_summaries``; written after every close.
"""

from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine

from app.domain.trading.entities import ProfitSummary
from app.domain.trading.ports import ProfitSummaryRepository
from app.infrastructure.persistence.database import as_utc
from app.infrastructure.persistence.tables import profit_summaries


class SqlProfitSummaryRepository(ProfitSummaryRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, user_id: str) -> Optional[ProfitSummary]:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(profit_summaries).where(profit_summaries.c.user_id == user_id)
            ).first()
        if row is None:
            return None
        return ProfitSummary(
            user_id=row.user_id,
            total_trades=row.total_trades,
            winning_trades=row.winning_trades,
            losing_trades=row.losing_trades,
            total_profit=row.total_profit,
            win_rate=row.win_rate,
            last_updated=as_utc(row.last_updated),
        )

    def upsert(self, summary: ProfitSummary) -> None:
        values = {
            "total_trades": summary.total_trades,
            "winning_trades": summary.winning_trades,
            "losing_trades": summary.losing_trades,
            "total_profit": summary.total_profit,
            "win_rate": summary.win_rate,
            "last_updated": summary.last_updated,
        }
        with self._engine.begin() as conn:
            result = conn.execute(
                update(profit_summaries)
                .where(profit_summaries.c.user_id == summary.user_id)
                .values(**values)
            )
            if result.rowcount == 0:
                conn.execute(insert(profit_summaries).values(user_id=summary.user_id, **values))

"""Persistence layer for saved calculator scenarios.

Visitors can save the inputs and summary of a calculation and view saved
scenarios side by side. The store defaults to SQLite for local development
but accepts any SQLAlchemy-compatible URL (e.g. PostgreSQL/MySQL).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine, delete, select
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


class SavedScenarioModel(Base):
    __tablename__ = "saved_scenarios"

    id = Column(String(64), primary_key=True)
    user_token = Column(String(64), index=True, nullable=False)
    calculator_type = Column(String(32), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    inputs_json = Column(Text, nullable=False)
    summary_json = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ComparisonStore:
    """Database-backed scenario store, scoped per visitor token."""

    def __init__(self, url: str, *, max_per_user: int = 10) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._max_per_user = max_per_user

    def list_scenarios(self, user_token: str, calculator_type: Optional[str] = None) -> List[Dict[str, Any]]:
        if not user_token:
            return []
        query = select(SavedScenarioModel).where(SavedScenarioModel.user_token == user_token)
        if calculator_type:
            query = query.where(SavedScenarioModel.calculator_type == calculator_type)
        with self._session_factory() as session:
            rows: Iterable[SavedScenarioModel] = session.execute(
                query.order_by(SavedScenarioModel.created_at.asc())
            ).scalars()
            return [self._to_dict(row) for row in rows]

    def add_scenario(
        self,
        user_token: str,
        scenario_id: str,
        calculator_type: str,
        name: str,
        inputs: dict,
        summary: dict,
    ) -> None:
        if not user_token:
            return
        payload = SavedScenarioModel(
            id=scenario_id,
            user_token=user_token,
            calculator_type=calculator_type,
            name=name,
            inputs_json=json.dumps(inputs),
            summary_json=json.dumps(summary),
        )
        with self._session_factory() as session:
            session.add(payload)
            session.commit()
        logger.debug("Saved %s scenario %s", calculator_type, scenario_id)
        self._trim_user(user_token)

    def remove_scenario(self, user_token: str, scenario_id: str) -> None:
        if not user_token:
            return
        self._delete(
            SavedScenarioModel.user_token == user_token,
            SavedScenarioModel.id == scenario_id,
        )

    def clear_scenarios(self, user_token: str) -> None:
        if not user_token:
            return
        self._delete(SavedScenarioModel.user_token == user_token)

    def _trim_user(self, user_token: str) -> None:
        """Drop the oldest scenarios beyond the per-visitor limit."""
        if self._max_per_user <= 0:
            return
        overflow = (
            select(SavedScenarioModel.id)
            .where(SavedScenarioModel.user_token == user_token)
            .order_by(SavedScenarioModel.created_at.desc())
            .offset(self._max_per_user)
        )
        with self._session_factory() as session:
            stale_ids = session.execute(overflow).scalars().all()
        if stale_ids:
            removed = self._delete(SavedScenarioModel.id.in_(stale_ids))
            logger.debug("Trimmed %d old scenarios", removed)

    def _delete(self, *criteria) -> int:
        with self._session_factory() as session:
            removed = session.execute(delete(SavedScenarioModel).where(*criteria)).rowcount
            session.commit()
        return removed

    @staticmethod
    def _to_dict(row: SavedScenarioModel) -> Dict[str, Any]:
        return {
            "id": row.id,
            "calculator_type": row.calculator_type,
            "name": row.name,
            "inputs": json.loads(row.inputs_json),
            "summary": json.loads(row.summary_json),
            "created_at": row.created_at.isoformat(),
        }


def create_store_from_env(url: str | None, max_per_user: str | None = None) -> ComparisonStore:
    limit = int(max_per_user) if max_per_user else 10
    return ComparisonStore(url or "sqlite:///comparison_data.sqlite3", max_per_user=limit)

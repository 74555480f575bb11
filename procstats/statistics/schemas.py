"""Pydantic schemas for metric snapshots and statistics responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CounterSnapshot(BaseModel):
    """Point-in-time value of a single counter."""

    name: str
    count: int = 0


class TimerSnapshot(BaseModel):
    """Point-in-time aggregates of a single timer (times in milliseconds)."""

    name: str
    total_calls: int = Field(default=0, ge=0)
    total_time: int = 0
    average_time: float = 0.0


class StatisticsEnvelope(BaseModel):
    """Envelope for responses from statistics endpoints."""

    ok: bool = True
    data: Any

    @classmethod
    def wrap(cls, data: Any) -> "StatisticsEnvelope":
        return cls(ok=True, data=data)

"""FastAPI application factory for the PositionFlow JSON API."""

from __future__ import annotations

from typing import Any, List

from fastapi import Depends, FastAPI
from pydantic import BaseModel, Field

from ..core.models import Transaction
from ..services.json_serializer import serialize_build_result
from ..services.multi_leg import ManualGrouping
from ..services.pipeline import build_positions
from ..services.strategy import Classifier
from ..services.summary import calculate_summary
from .dependencies import get_classifier


class ManualGroupingPayload(BaseModel):
    """User-defined grouping submitted alongside the ledger."""

    transaction_ids: List[str] = Field(..., min_length=1)
    strategy_name: str = Field(..., min_length=1)


class AnalyzeRequest(BaseModel):
    """Body of ``POST /api/analyze``."""

    transactions: List[Transaction]
    manual_groupings: List[ManualGroupingPayload] = Field(default_factory=list)


def create_app() -> FastAPI:
    """Construct and return the FastAPI application."""
    app = FastAPI(title="PositionFlow API")

    @app.get("/api/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/analyze", tags=["analysis"])
    def analyze(
        body: AnalyzeRequest,
        classifier: Classifier = Depends(get_classifier),
    ) -> dict[str, Any]:
        groupings = [
            ManualGrouping(
                transaction_ids=tuple(grouping.transaction_ids),
                strategy_name=grouping.strategy_name,
            )
            for grouping in body.manual_groupings
        ]
        result = build_positions(body.transactions, groupings, classifier=classifier)
        summary = calculate_summary(result.positions)
        return serialize_build_result(result, summary)

    return app

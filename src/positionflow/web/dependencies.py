"""Common dependency providers for the web application."""

from __future__ import annotations

from ..services.strategy import Classifier, classify_strategy


def get_classifier() -> Classifier:
    """
    FastAPI dependency that yields the strategy classifier.

    Tests can override this dependency to supply fakes or fixtures.
    """
    return classify_strategy

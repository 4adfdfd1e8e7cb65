from __future__ import annotations

from .base import BaseSearchConnector
from .tavily import TavilyConnector

__all__ = ["BaseSearchConnector", "TavilyConnector"]

from abc import ABC, abstractmethod
from typing import List

from ..domain import RawSearchResult


class BaseSearchConnector(ABC):
    name: str

    @abstractmethod
    async def search(self, query: str, limit: int = 8) -> List[RawSearchResult]:
        """
        Return provider-ordered results, or an empty list on any expected
        failure (network, auth, malformed payload).
        """
        ...

# src/providers/base.py

from abc import ABC, abstractmethod
from typing import List
from core.models import QuoteRequest, Quote


class LogisticsSearchProvider(ABC):

    @abstractmethod
    def search(self, request: QuoteRequest) -> List[Quote]:
        ...

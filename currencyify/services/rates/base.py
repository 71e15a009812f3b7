from __future__ import annotations

"""Rate provider abstraction.

A provider quotes one or more currencies against a base in a single call.
"""
from abc import ABC, abstractmethod
from typing import Collection, Dict

from currencyify.models.rates import ProviderQuote


class RateProvider(ABC):
    name: str = "abstract"

    @abstractmethod
    def fetch(self, base: str, codes: Collection[str]) -> Dict[str, ProviderQuote]:
        """Return a quote for every code in `codes` against `base`.

        Either every requested code is present in the result or ProviderError
        is raised; implementations never return a partial mapping.
        """
        raise NotImplementedError

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from currencyify.core.errors import ProviderError
from currencyify.models.rates import RateRecord
from .base import RateProvider
from .cache_service import CacheKeyFn, CacheStore, pair_cache_key

"""Cache-aside rate resolution.

Flow for resolve(base, codes):
    1. Look up the cache per code; hits go straight into the result.
    2. No misses -> done, no remote call.
    3. Otherwise one provider fetch covering every miss, then a best-effort
       cache write per fetched rate.
    4. Any provider failure fails the whole call; callers never see a partial map.

Concurrent resolves that miss on the same cache key share a single in-flight
provider call (single-flight). Each caller fetches only the keys nobody else
is already fetching, and waits on the rest.
"""

logger = logging.getLogger("currencyify.resolver")


class _Call:
    def __init__(self) -> None:
        self._done = threading.Event()
        self.record: Optional[RateRecord] = None
        self.error: Optional[BaseException] = None

    def finish(self, record: Optional[RateRecord], error: Optional[BaseException]) -> None:
        self.record = record
        self.error = error
        self._done.set()

    def wait(self, timeout: float) -> RateRecord:
        if not self._done.wait(timeout):
            raise ProviderError("timed out waiting for an in-flight exchange rate fetch")
        if self.error is not None:
            if isinstance(self.error, ProviderError):
                raise ProviderError(self.error.message) from self.error
            raise ProviderError(f"in-flight exchange rate fetch failed: {self.error}") from self.error
        if self.record is None:
            raise ProviderError("in-flight exchange rate fetch returned no rate")
        return self.record


class SingleFlight:
    """Per-key registry of in-flight fetches."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: Dict[str, _Call] = {}

    def claim(self, keys: Iterable[str]) -> Tuple[Dict[str, _Call], Dict[str, _Call]]:
        """Split keys into (owned, joined) calls.

        Owned calls must be settled by the caller via settle(); joined calls
        belong to another caller and only need waiting on.
        """
        owned: Dict[str, _Call] = {}
        joined: Dict[str, _Call] = {}
        with self._lock:
            for key in keys:
                call = self._calls.get(key)
                if call is None:
                    call = _Call()
                    self._calls[key] = call
                    owned[key] = call
                else:
                    joined[key] = call
        return owned, joined

    def settle(
        self,
        owned: Dict[str, _Call],
        records: Dict[str, RateRecord],
        error: Optional[BaseException] = None,
    ) -> None:
        with self._lock:
            for key in owned:
                self._calls.pop(key, None)
        for key, call in owned.items():
            call.finish(records.get(key), error)

    def __len__(self) -> int:
        with self._lock:
            return len(self._calls)


class RateResolver:
    def __init__(
        self,
        provider: RateProvider,
        cache: CacheStore,
        *,
        inflight_wait_timeout: float = 10.0,
    ):
        self._provider = provider
        self._cache = cache
        self._inflight = SingleFlight()
        self._wait_timeout = inflight_wait_timeout

    def resolve(
        self, base: str, codes: Sequence[str], cache_key: CacheKeyFn = pair_cache_key
    ) -> Dict[str, RateRecord]:
        """Return a RateRecord for every code against `base`, in request order."""
        found: Dict[str, RateRecord] = {}
        pending: List[str] = []
        for code in codes:
            if code in found or code in pending:
                continue
            lookup = self._cache.get(cache_key(base, code))
            if lookup.hit and lookup.record is not None:
                found[code] = lookup.record
            else:
                pending.append(code)

        if pending:
            logger.info(
                "resolving %s against %s (%d cached, %d pending)",
                ",".join(pending),
                base,
                len(found),
                len(pending),
            )
            found.update(self._resolve_pending(base, pending, cache_key))
        else:
            logger.debug("all %d rates against %s served from cache", len(found), base)
        return {code: found[code] for code in codes}

    def _resolve_pending(
        self, base: str, pending: List[str], cache_key: CacheKeyFn
    ) -> Dict[str, RateRecord]:
        code_by_key = {cache_key(base, code): code for code in pending}
        owned, joined = self._inflight.claim(code_by_key)

        records: Dict[str, RateRecord] = {}
        if owned:
            owned_codes = [code_by_key[key] for key in owned]
            try:
                fetched = self._fetch_and_store(base, owned_codes, cache_key)
            except BaseException as e:
                self._inflight.settle(owned, {}, e)
                raise
            self._inflight.settle(
                owned, {cache_key(base, code): rec for code, rec in fetched.items()}
            )
            records.update(fetched)

        for key, call in joined.items():
            logger.debug("joining in-flight fetch for %s", key)
            records[code_by_key[key]] = call.wait(self._wait_timeout)
        return records

    def _fetch_and_store(
        self, base: str, codes: List[str], cache_key: CacheKeyFn
    ) -> Dict[str, RateRecord]:
        quotes = self._provider.fetch(base, codes)
        missing = [code for code in codes if code not in quotes]
        if missing:
            raise ProviderError(f"provider returned no rate for {', '.join(missing)}")
        records: Dict[str, RateRecord] = {}
        for code in codes:
            record = RateRecord.from_quote(code, quotes[code])
            self._cache.set(cache_key(base, code), record)
            records[code] = record
        return records

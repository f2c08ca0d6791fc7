# sep20/registry.py
"""
In-memory registry of discovered SEP-20 contracts.

One registry is built per session and handed to every consumer. Entries are
keyed by normalized address, inserted at most once and never removed.
Failed probes are not cached, so a later lookup retries.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, Optional

from sep20 import runtime_state
from sep20.codec import normalize_address
from sep20.errors import InvalidAddress
from sep20.models import ContractMetadata
from sep20.node import NodeClient
from sep20.probe import probe_contract

logger = logging.getLogger("sep20.registry")

ProbeFn = Callable[[NodeClient, str], Optional[ContractMetadata]]


class ContractRegistry:
    def __init__(self, node: NodeClient, workers: int = 8, probe: ProbeFn = probe_contract):
        self.node = node
        self.workers = max(1, int(workers))
        self._probe = probe
        self._lock = threading.Lock()
        self._contracts: Dict[str, ContractMetadata] = {}
        # key -> [lock, holders]; dropped once nobody holds or waits on it
        self._key_locks: Dict[str, list] = {}

    def __contains__(self, address: object) -> bool:
        try:
            key = normalize_address(address)  # type: ignore[arg-type]
        except InvalidAddress:
            return False
        with self._lock:
            return key in self._contracts

    def __len__(self) -> int:
        with self._lock:
            return len(self._contracts)

    def contracts(self) -> List[ContractMetadata]:
        with self._lock:
            return list(self._contracts.values())

    def addresses(self) -> List[str]:
        with self._lock:
            return list(self._contracts)

    def get(self, address: str) -> Optional[ContractMetadata]:
        """Cached entry for ``address``; never touches the node."""
        key = normalize_address(address)
        with self._lock:
            return self._contracts.get(key)

    def _acquire_key(self, key: str) -> threading.Lock:
        with self._lock:
            entry = self._key_locks.get(key)
            if entry is None:
                entry = self._key_locks[key] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _release_key(self, key: str) -> None:
        with self._lock:
            entry = self._key_locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._key_locks[key]

    def get_or_probe(self, address: str) -> Optional[ContractMetadata]:
        key = normalize_address(address)
        cached = self.get(key)
        if cached is not None:
            return cached

        lock = self._acquire_key(key)
        try:
            with lock:
                # another thread may have probed while we waited
                cached = self.get(key)
                if cached is not None:
                    return cached
                meta = self._probe(self.node, key)
                if meta is None:
                    return None
                with self._lock:
                    self._contracts.setdefault(key, meta)
                    return self._contracts[key]
        finally:
            self._release_key(key)

    def seed(self, addresses: Iterable[str]) -> List[ContractMetadata]:
        """Probe all ``addresses`` concurrently and keep the ones that are tokens."""
        keys: List[str] = []
        for raw in addresses:
            try:
                key = normalize_address(raw)
            except InvalidAddress as exc:
                logger.warning("seed: skipping %s", exc)
                continue
            if key not in keys:
                keys.append(key)

        found: List[ContractMetadata] = []
        if not keys:
            runtime_state.note_seed(0)
            return found

        with ThreadPoolExecutor(max_workers=min(self.workers, len(keys))) as pool:
            futures = {pool.submit(self.get_or_probe, key): key for key in keys}
            for fut in as_completed(futures):
                key = futures[fut]
                try:
                    meta = fut.result()
                except Exception:
                    logger.warning("seed: probe of %s raised", key, exc_info=True)
                    continue
                if meta is None:
                    logger.warning("seed: %s is not a SEP-20 contract, dropped", key)
                    continue
                found.append(meta)

        runtime_state.note_seed(len(found))
        logger.info("seeded %d/%d contracts", len(found), len(keys))
        return found

    def resolve_all(self, addresses: Iterable[str]) -> List[Optional[ContractMetadata]]:
        """``get_or_probe`` for each address, in input order; invalid ones give ``None``."""
        out: List[Optional[ContractMetadata]] = []
        for raw in addresses:
            try:
                out.append(self.get_or_probe(raw))
            except InvalidAddress as exc:
                logger.warning("resolve_all: %s", exc)
                out.append(None)
        return out

"""Asynchronous asset loader with per-asset callbacks and an all-settled join."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Iterable, List, Optional

from showroom.modules.m1_scene_description.models import AssetDescriptor
from showroom.shared.scene_graph import Group

from .backends import AssetBackend, GltfBackend
from .models import AssetLoadError, Failed, Loaded, LoadResult, LoadState

log = logging.getLogger(__name__)

LoadedCallback = Callable[[AssetDescriptor, Group], None]
FailedCallback = Callable[[AssetDescriptor, AssetLoadError], None]
SettledCallback = Callable[[List[LoadResult]], None]


class AssetLoader:
    """Issues one load per descriptor; parsing runs off the event loop.

    Callbacks always run on the event-loop thread, one at a time, in
    completion order (which is not descriptor order).  There is no retry:
    a descriptor leaves PENDING exactly once.
    """

    def __init__(self, backend: Optional[AssetBackend] = None,
                 on_loaded: Optional[LoadedCallback] = None,
                 on_failed: Optional[FailedCallback] = None,
                 on_all_settled: Optional[SettledCallback] = None):
        self.backend = backend or GltfBackend()
        self.on_loaded = on_loaded
        self.on_failed = on_failed
        self.on_all_settled = on_all_settled
        self._order: List[str] = []
        self._states: Dict[str, LoadState] = {}
        self._results: Dict[str, LoadResult] = {}
        self._issued: set = set()
        self._settled_fired = False

    # ── bookkeeping ──────────────────────────────────────────────

    def track(self, descriptors: Iterable[AssetDescriptor]) -> None:
        """Register descriptors as PENDING so the all-settled notification waits for them."""
        for descriptor in descriptors:
            if descriptor.name not in self._states:
                self._order.append(descriptor.name)
                self._states[descriptor.name] = LoadState.PENDING

    def state(self, name: str) -> LoadState:
        return self._states[name]

    @property
    def states(self) -> Dict[str, LoadState]:
        return dict(self._states)

    @property
    def pending(self) -> List[str]:
        return [n for n in self._order if self._states[n] is LoadState.PENDING]

    @property
    def all_settled(self) -> bool:
        return bool(self._order) and not self.pending

    def result(self, name: str) -> Optional[LoadResult]:
        return self._results.get(name)

    # ── loading ──────────────────────────────────────────────────

    async def load(self, descriptor: AssetDescriptor) -> LoadResult:
        if descriptor.name in self._issued:
            raise ValueError(f"Asset '{descriptor.name}' was already requested")
        self.track([descriptor])
        self._issued.add(descriptor.name)
        log.info("[M2] loading '%s' from %s", descriptor.name, descriptor.source_path)

        try:
            node = await asyncio.to_thread(self.backend.parse, descriptor)
        except Exception as exc:
            error = AssetLoadError(descriptor, exc)
            log.error("[M2] error loading '%s': %s", descriptor.name, exc)
            if descriptor.missing_hint:
                log.warning("[M2] %s", descriptor.missing_hint)
            result: LoadResult = Failed(descriptor, error)
        else:
            log.info("[M2] loaded '%s' (%d meshes)", descriptor.name, len(node.meshes()))
            result = Loaded(descriptor, node)

        self._settle(result)
        return result

    async def await_all(self, descriptors: Iterable[AssetDescriptor]) -> List[LoadResult]:
        """Load every descriptor concurrently; settles once none is PENDING.

        Results are returned in descriptor order.
        """
        descriptors = list(descriptors)
        self.track(descriptors)
        results = await asyncio.gather(*(self.load(d) for d in descriptors))
        failed = sum(1 for r in results if not r.ok)
        log.info("[M2] %d assets settled (%d failed)", len(results), failed)
        return list(results)

    def schedule(self, descriptors: Iterable[AssetDescriptor]) -> List[asyncio.Task]:
        """Fire-and-forget variant of await_all; needs a running loop."""
        descriptors = list(descriptors)
        self.track(descriptors)
        return [asyncio.ensure_future(self.load(d)) for d in descriptors]

    def _settle(self, result: LoadResult) -> None:
        name = result.descriptor.name
        self._states[name] = result.state
        self._results[name] = result

        if isinstance(result, Loaded):
            self._notify("on_loaded", name, self.on_loaded, result.descriptor, result.node)
        else:
            self._notify("on_failed", name, self.on_failed, result.descriptor, result.error)

        if self.all_settled and not self._settled_fired:
            self._settled_fired = True
            self._notify("on_all_settled", name, self.on_all_settled,
                         [self._results[n] for n in self._order])

    @staticmethod
    def _notify(hook: str, name: str, callback: Optional[Callable], *args) -> None:
        """Run a callback; its errors are logged and never escape the load."""
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            log.exception("[M2] %s callback failed for '%s'", hook, name)

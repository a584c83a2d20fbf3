# MIT License (see LICENSE)
"""
Wall-clock timing of scheduler stages.

The scheduler wraps every stage, and the end-of-tick maintain, in
``Profiler.section(name)`` when a profiler is attached (``grav run
--profile``). Stages of one generation run on worker threads, so samples
are folded into per-stage running totals under a lock.

Example:
    profiler = Profiler()
    sim = Simulation(world, ctx, build_default_scheduler(workers=4, profiler=profiler))
    sim.run(100)
    print(profiler.stats.format())
"""
from __future__ import annotations
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Iterator


@dataclass
class StageTiming:
    """Running totals for one stage, in seconds."""
    count: int = 0
    total: float = 0.0
    longest: float = 0.0

    def record(self, seconds: float) -> None:
        self.count += 1
        self.total += seconds
        self.longest = max(self.longest, seconds)


@dataclass
class ProfileStats:
    """Per-stage timings collected by a Profiler."""
    timings: dict[str, StageTiming] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def add(self, name: str, seconds: float) -> None:
        with self._lock:
            self.timings.setdefault(name, StageTiming()).record(seconds)

    def summary(self) -> dict[str, dict[str, float]]:
        """
        Timings in milliseconds, keyed by stage name.

        Each entry holds ``n`` (sample count), ``mean_ms``, ``max_ms`` and
        ``total_ms``.
        """
        with self._lock:
            totals = [(name, t.count, t.total, t.longest) for name, t in self.timings.items()]
        return {
            name: {
                "n": count,
                "mean_ms": 1e3 * total / count,
                "max_ms": 1e3 * longest,
                "total_ms": 1e3 * total,
            }
            for name, count, total, longest in totals
        }

    def format(self) -> str:
        """Summary as an aligned text table, slowest stage first."""
        rows = sorted(self.summary().items(), key=lambda kv: kv[1]["total_ms"], reverse=True)
        lines = [f"{'section':<20} {'n':>7} {'mean ms':>10} {'max ms':>10} {'total ms':>11}"]
        for name, s in rows:
            lines.append(
                f"{name:<20} {s['n']:>7d} {s['mean_ms']:>10.3f} {s['max_ms']:>10.3f} {s['total_ms']:>11.2f}"
            )
        return "\n".join(lines)


class Profiler:
    """Collects stage timings into ``self.stats``; safe to share between threads."""

    def __init__(self) -> None:
        self.stats = ProfileStats()

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        # Recorded even when the stage raises.
        start = time.perf_counter()
        try:
            yield
        finally:
            self.stats.add(name, time.perf_counter() - start)

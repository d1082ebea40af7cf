"""Benchmark: Command resolution throughput — resolutions per second.

Measures how many CommandDispatcher.resolve() calls complete per second
against the bundled example plugins, mixing plugin hits with search
fallbacks.
"""
from __future__ import annotations

import json
import sys
import tempfile
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bunnylol.convenience import Bunnylol
from bunnylol.plugins.paths import PathResolver

_PLUGINS = Path(__file__).parent.parent / "examples" / "plugins"
_ITERATIONS: int = 2_000
_COMMANDS: list[str] = [
    "gh facebook/react",
    "yt rust tutorial",
    "jira PROJ-123",
    "jira flaky login test",
    "unbound query text",
]


def bench_resolve_throughput() -> dict[str, object]:
    """Benchmark Bunnylol.resolve() throughput.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    with tempfile.TemporaryDirectory() as tmp:
        resolver = PathResolver(user_dir=Path(tmp) / "commands", vendor_dirs=[_PLUGINS])
        app = Bunnylol(path_resolver=resolver)

        latencies_ms: list[float] = []
        start = time.perf_counter()
        for i in range(_ITERATIONS):
            command = _COMMANDS[i % len(_COMMANDS)]
            t0 = time.perf_counter()
            app.resolve(command)
            latencies_ms.append((time.perf_counter() - t0) * 1000)
        total = time.perf_counter() - start

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    result: dict[str, object] = {
        "operation": "resolve_throughput",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_resolve_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"p99={result['p99_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_resolve_throughput()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "resolve_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")

"""Benchmark: Registry rebuild latency — per-scan p50/p99.

Measures how long PluginRegistry.rebuild() takes to rescan a directory of
generated plugins, which bounds how quickly live reload publishes edits.
"""
from __future__ import annotations

import json
import sys
import tempfile
import time
import tracemalloc
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bunnylol.plugins.loader import PluginLoader
from bunnylol.plugins.paths import PathResolver
from bunnylol.plugins.registry import PluginRegistry
from bunnylol.plugins.sandbox import ExecutionSandbox

_PLUGIN_COUNT: int = 50
_ITERATIONS: int = 20

_TEMPLATE = '''\
def describe():
    return {{
        "bindings": ["cmd{index}", "c{index}"],
        "description": "Generated command {index}",
        "example": "cmd{index} query",
    }}


def process(full_args):
    return "https://example.com/{index}?q=" + url_encode(get_args(full_args, "cmd{index}"))
'''


def bench_rebuild_latency() -> dict[str, object]:
    """Benchmark PluginRegistry.rebuild() latency.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    with tempfile.TemporaryDirectory() as tmp:
        user_dir = Path(tmp) / "commands"
        user_dir.mkdir()
        for index in range(_PLUGIN_COUNT):
            (user_dir / f"cmd{index}.py").write_text(
                _TEMPLATE.format(index=index), encoding="utf-8"
            )
        resolver = PathResolver(user_dir=user_dir, vendor_dirs=[])
        registry = PluginRegistry(resolver, PluginLoader(ExecutionSandbox(), resolver))

        tracemalloc.start()
        latencies_ms: list[float] = []
        for _ in range(_ITERATIONS):
            t0 = time.perf_counter()
            registry.rebuild()
            latencies_ms.append((time.perf_counter() - t0) * 1000)
        _, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000
    result: dict[str, object] = {
        "operation": "registry_rebuild_latency",
        "iterations": _ITERATIONS,
        "plugins": _PLUGIN_COUNT,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": round(peak / (1024 * 1024), 4),
    }
    print(
        f"[bench_rebuild_latency] {result['operation']}: "
        f"p99={result['p99_latency_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_rebuild_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "rebuild_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")

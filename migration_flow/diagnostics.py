"""
Diagnostics and performance reporting
Warnings raised during a transform are recorded here so callers can inspect them
"""
import time
import psutil
import os
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Any, List


# Diagnostic categories
COORDINATE_FALLBACK = 'coordinate_fallback'
MISSING_ENDPOINT = 'missing_endpoint'
EMPTY_PERIOD = 'empty_period'
UNKNOWN_PERIOD = 'unknown_period'
LOCATION_SET_MISMATCH = 'location_set_mismatch'


@dataclass
class Diagnostic:
    """A single recorded warning"""
    category: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)


class DiagnosticLog:
    """
    Collects warnings from the transform layer

    Every warning is stored; with verbose=True it is also printed the way
    the pipeline scripts print progress.
    """

    def __init__(self, verbose=False):
        self.verbose = verbose
        self.entries: List[Diagnostic] = []

    def warn(self, category, message, **context):
        self.entries.append(Diagnostic(category, message, context))
        if self.verbose:
            print(f"  Warning: {message}")

    def by_category(self, category) -> List[Diagnostic]:
        return [d for d in self.entries if d.category == category]

    def count(self, category=None) -> int:
        if category is None:
            return len(self.entries)
        return len(self.by_category(category))

    def clear(self):
        self.entries = []

    def __len__(self):
        return len(self.entries)

    def print_report(self):
        """Print warning counts per category"""
        print("\n" + "="*80)
        print("DIAGNOSTICS")
        print("="*80)

        if not self.entries:
            print("  ✓ No warnings")
            return

        counts = Counter(d.category for d in self.entries)
        for category, n in counts.most_common():
            print(f"  {category:<30} {n:>8,}")
        print("="*80 + "\n")


class PipelineBenchmark:
    """Per-stage timing and memory for the view-building pipeline"""

    def __init__(self):
        self.timings = {}
        self.memory_usage = {}
        self.process = psutil.Process(os.getpid())
        self.start_time = time.time()
        self.start_memory = self._rss_mb()

    def _rss_mb(self):
        return self.process.memory_info().rss / 1024 / 1024

    def start_stage(self, stage_name):
        """Start timing a stage"""
        self.timings[stage_name] = {'start': time.time()}
        self.memory_usage[stage_name] = {'start': self._rss_mb()}

    def end_stage(self, stage_name):
        """End timing a stage"""
        if stage_name not in self.timings:
            print(f"Warning: Stage '{stage_name}' was not started")
            return

        timing = self.timings[stage_name]
        timing['end'] = time.time()
        timing['elapsed'] = timing['end'] - timing['start']

        current_memory = self._rss_mb()
        self.memory_usage[stage_name]['end'] = current_memory
        self.memory_usage[stage_name]['delta'] = current_memory - self.memory_usage[stage_name]['start']

    def elapsed(self, stage_name) -> float:
        return self.timings.get(stage_name, {}).get('elapsed', 0.0)

    def print_report(self):
        """Print benchmark report"""
        total_time = time.time() - self.start_time
        total_memory = self._rss_mb() - self.start_memory

        print("\n" + "="*80)
        print("📊 PIPELINE PERFORMANCE REPORT")
        print("="*80)
        print(f"{'Stage':<40} {'Time (s)':<15} {'Delta (MB)':<15}")
        print("-" * 80)

        for stage, timing in self.timings.items():
            if 'elapsed' in timing:
                delta = self.memory_usage[stage].get('delta', 0.0)
                print(f"{stage:<40} {timing['elapsed']:>10.2f}     {delta:>10.1f}")

        print("-" * 80)
        print(f"{'TOTAL':<40} {total_time:>10.2f}     {total_memory:>10.1f}")
        print("="*80 + "\n")

"""Pipeline package — concurrent fetch, extraction and persistence."""

from ogparser.pipeline.latch import CountdownLatch
from ogparser.pipeline.orchestrator import BatchReport, collect_fetch_results, process_batch
from ogparser.pipeline.runner import bootstrap, run_forever, run_once
from ogparser.pipeline.updater import apply_update

__all__ = [
    "CountdownLatch",
    "BatchReport",
    "collect_fetch_results",
    "process_batch",
    "apply_update",
    "bootstrap",
    "run_once",
    "run_forever",
]

"""
Parallel fan-out with per-source failure isolation.

Every multi-source endpoint runs its provider calls through fan_out() and
reports failed sources in an `errors` list next to the merged data.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from config import FAN_OUT_WORKERS

logger = logging.getLogger(__name__)


@dataclass
class AggregateResult:
    data: Dict[str, Any] = field(default_factory=dict)
    errors: List[Dict[str, str]] = field(default_factory=list)

    def record_error(self, source: str, error: Exception) -> None:
        logger.warning(f"Source '{source}' failed: {error}")
        self.errors.append({"source": source, "error": str(error)})


def fan_out(tasks: Dict[str, Callable[[], Any]], max_workers: int = FAN_OUT_WORKERS) -> AggregateResult:
    """
    Run each task concurrently and collect results by source name.

    A task that raises is recorded in `errors` and left out of `data`; the
    other tasks are unaffected.
    """
    result = AggregateResult()
    if not tasks:
        return result

    with ThreadPoolExecutor(max_workers=min(max_workers, len(tasks))) as executor:
        future_to_source = {executor.submit(task): source for source, task in tasks.items()}

        for future in as_completed(future_to_source):
            source = future_to_source[future]
            try:
                result.data[source] = future.result()
            except Exception as e:
                result.record_error(source, e)

    return result

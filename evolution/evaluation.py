"""
virtual_creatures module: evolution/evaluation.py

Parallel fitness evaluation of one generation. Members are independent, so
each one runs on its own worker; a shared event cancels the members that have
not started yet.
"""

from __future__ import annotations
from concurrent.futures import CancelledError, ThreadPoolExecutor
import threading
from typing import Callable, List, Optional, Sequence

from loguru import logger

import config
from evolution.selection import PopulationMember
from morphology.morphology import Morphology

Evaluate = Callable[[Morphology], float]


def evaluate_population(
    members: Sequence[PopulationMember],
    evaluate: Evaluate,
    max_workers: int = config.MAX_WORKERS,
    cancel_event: Optional[threading.Event] = None,
) -> List[Optional[float]]:
    """
    Return one fitness per member, in member order. A member that was cancelled
    before it started gets None. Exceptions raised by ``evaluate`` propagate.
    """
    if cancel_event is None:
        cancel_event = threading.Event()

    def run(member: PopulationMember) -> Optional[float]:
        if cancel_event.is_set():
            return None
        return evaluate(member.morphology)

    results: List[Optional[float]] = []
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        futures = [pool.submit(run, m) for m in members]
        for future in futures:
            if cancel_event.is_set():
                future.cancel()
            try:
                results.append(future.result())
            except CancelledError:
                results.append(None)

    skipped = sum(1 for r in results if r is None)
    if skipped:
        logger.warning(f"[evaluate_population] {skipped}/{len(members)} members cancelled")
    return results

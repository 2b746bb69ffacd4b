"""
Fan-out helper for independent remote operations.

Every member coroutine is created before any is awaited, and the batch waits
for all of them to settle. A failing member never cancels or short-circuits
the others; outcomes are collected into a BatchReport.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class BatchReport:
    """Per-member outcomes of one fan-out batch."""

    name: str
    succeeded: List[str] = field(default_factory=list)
    # (label, error) pairs; labels need not be unique
    failed: List[Tuple[str, BaseException]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def failed_labels(self) -> List[str]:
        return [label for label, _ in self.failed]


async def run_batch(
    name: str,
    keys: Iterable[T],
    operation: Callable[[T], Awaitable[object]],
    label: Callable[[T], str] = str,
) -> BatchReport:
    """
    Run operation(key) for every key concurrently and report each outcome.

    Args:
        name: Batch name used in logs and reports
        keys: Members of the batch
        operation: Coroutine factory invoked once per member
        label: Human readable identifier for a member

    Returns:
        BatchReport with succeeded labels and failed (label, exception) pairs
    """
    members = list(keys)
    report = BatchReport(name=name)
    if not members:
        logger.info(f"[{name}] nothing to do")
        return report

    results = await asyncio.gather(
        *(operation(member) for member in members), return_exceptions=True
    )

    for member, result in zip(members, results):
        member_label = label(member)
        if isinstance(result, BaseException):
            # Cancellation is not a member failure
            if isinstance(result, asyncio.CancelledError):
                raise result
            logger.error(f"[{name}] {member_label} failed: {result}")
            report.failed.append((member_label, result))
        else:
            report.succeeded.append(member_label)

    logger.info(
        f"[{name}] {len(report.succeeded)}/{report.total} succeeded"
        + (f", failed: {report.failed_labels}" if report.failed else "")
    )
    return report

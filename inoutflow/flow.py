"""Native-token inflow/outflow aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol


class Transfer(Protocol):
    from_address: str
    to_address: str
    value: int
    is_error: bool


@dataclass(frozen=True)
class FlowSummary:
    count: int
    failed: int
    inflow: int
    outflow: int

    @property
    def net(self) -> int:
        return self.inflow - self.outflow

    def __add__(self, other: "FlowSummary") -> "FlowSummary":
        return FlowSummary(
            count=self.count + other.count,
            failed=self.failed + other.failed,
            inflow=self.inflow + other.inflow,
            outflow=self.outflow + other.outflow,
        )


def summarize_flow(records: Iterable[Transfer], address: str, include_failed: bool = False) -> FlowSummary:
    """Sum wei values sent from and received by ``address``.

    Records flagged ``is_error`` moved no value and are skipped unless
    ``include_failed`` is set. A self-transfer counts on both sides.
    """

    count = failed = inflow = outflow = 0
    for record in records:
        count += 1
        if record.is_error:
            failed += 1
            if not include_failed:
                continue
        if record.from_address == address:
            outflow += record.value
        if record.to_address == address:
            inflow += record.value
    return FlowSummary(count=count, failed=failed, inflow=inflow, outflow=outflow)

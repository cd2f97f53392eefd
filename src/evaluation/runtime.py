"""
In-Process Host Harness
=======================

Minimal host-runtime pieces for running an operator over an iterable of
records: a Collector protocol, a list-backed collector, and run_stream().

Records are processed sequentially; emitted records keep input order and
dropped records are simply absent. An error propagated by the exception
handling strategy escapes run_stream() and ends the stream.
"""

from typing import Any, Dict, Iterable, Iterator, List, Protocol, runtime_checkable


@runtime_checkable
class Collector(Protocol):
    """Downstream sink receiving emitted records."""

    def collect(self, record: Dict[str, Any]) -> None:
        ...


class ListCollector:
    """Collects emitted records into a list."""

    def __init__(self):
        self.records: List[Dict[str, Any]] = []

    def collect(self, record: Dict[str, Any]) -> None:
        self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)


def run_stream(operator: Any, records: Iterable[Dict[str, Any]]) -> Iterator[Dict[str, Any]]:
    """
    Feed records through an operator, yielding emitted records in order.

    The operator is started before the first record and stopped when the
    stream ends, including when it ends with an error.
    """
    operator.start()
    try:
        for record in records:
            output = operator.process_one(record)
            if output is not None:
                yield output
    finally:
        operator.stop()

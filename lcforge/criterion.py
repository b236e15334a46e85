"""Summarise benchmark results exported as raw CSV.

Each CSV line holds one benchmark sample:
``group,function,value,throughput_num,throughput_type,sample_measured_value,unit,iteration_count``.
The average time per iteration of every sample is collected per benchmark
group and library (``AWS-LC`` or ``Ring``). The chosen statistics of the two
libraries are then printed side by side, with the relative difference.
"""

from __future__ import annotations

import argparse
import math
import sys
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from functools import cmp_to_key
from itertools import zip_longest
from pathlib import Path

__all__ = [
    "Stats",
    "FinalizedStats",
    "Report",
    "compute",
    "numerical_string_compare",
    "load_results",
    "main",
]

_DIGITS = frozenset("0123456789")
_FIELD_COUNT = 8


@dataclass
class Stats:
    """Samples collected for one benchmark, in the order they were read."""

    samples: list[float] = field(default_factory=list)

    def finalize(self) -> FinalizedStats:
        """Return the samples sorted, ready for order statistics."""
        return FinalizedStats(tuple(sorted(self.samples)))


@dataclass(frozen=True)
class FinalizedStats:
    """Sorted samples."""

    samples: tuple[float, ...]

    def percentile(self, percent: float) -> float:
        """The sample at fraction ``percent`` (0.0 to 1.0) of the sorted data."""
        if percent >= 0.9999999:
            return self.samples[-1]
        if percent < 0.0:
            return self.samples[0]
        return self.samples[math.trunc(percent * len(self.samples))]

    def median(self) -> float:
        return self.percentile(0.5)

    def max(self) -> float:
        return self.samples[-1]

    def min(self) -> float:
        return self.samples[0]


def _relative(aws: float, ring: float) -> float:
    if ring == 0.0:
        ratio = math.nan if aws == 0.0 or math.isnan(aws) else math.copysign(math.inf, aws)
    else:
        ratio = aws / ring
    return 100.0 * (1.0 - ratio)


def compute(
    aws_stats: FinalizedStats,
    ring_stats: FinalizedStats,
    comp: Callable[[FinalizedStats], float],
) -> tuple[float, float, float]:
    """Apply ``comp`` to both statistics; return both values and the % difference."""
    aws = comp(aws_stats)
    ring = comp(ring_stats)
    return aws, ring, _relative(aws, ring)


def _fmt(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return f"{value:.2f}"


@dataclass
class Report:
    """Which statistics to print for each benchmark."""

    min: bool = False
    median: bool = False
    max: bool = False
    percentiles: list[int] = field(default_factory=list)
    verbose: bool = False

    def _selected(self) -> list[tuple[str, Callable[[FinalizedStats], float]]]:
        chosen: list[tuple[str, Callable[[FinalizedStats], float]]] = []
        if self.min:
            chosen.append(("min", FinalizedStats.min))
        if self.median:
            chosen.append(("median", FinalizedStats.median))
        if self.max:
            chosen.append(("max", FinalizedStats.max))
        for pct in sorted(self.percentiles):
            fraction = pct / 100.0
            chosen.append(
                (f"P{pct:02d}", lambda s, fraction=fraction: s.percentile(fraction))
            )
        return chosen

    def header_line(self) -> str:
        """Column headings, each group of three preceded by a comma."""
        return "".join(
            f",aws-lc ({label}), ring ({label}), % diff ({label})"
            for label, _ in self._selected()
        )

    def data_line(self, aws_stats: FinalizedStats, ring_stats: FinalizedStats) -> str:
        """The values for one benchmark, matching :meth:`header_line`."""
        parts = []
        for _, comp in self._selected():
            aws, ring, rel = compute(aws_stats, ring_stats, comp)
            parts.append(f",{_fmt(aws)},{_fmt(ring)},{_fmt(rel)}")
        return "".join(parts)


def numerical_string_compare(a: str, b: str) -> int:
    """Compare strings so that embedded numbers order by value.

    Returns -1, 0 or 1.
    """

    def cmp(x, y) -> int:
        return (x > y) - (x < y)

    number_compare = False
    a_num = 0
    b_num = 0
    for ac, bc in zip_longest(a, b):
        if bc is None:
            return 1
        if ac is None:
            return -1
        if ac in _DIGITS:
            if bc in _DIGITS:
                if ac == bc:
                    continue
                a_num = a_num * 10 + int(ac)
                b_num = b_num * 10 + int(bc)
                number_compare = True
            elif number_compare:
                return 1
            else:
                return cmp(ac, bc)
        elif bc in _DIGITS:
            return -1 if number_compare else cmp(ac, bc)
        elif number_compare:
            return cmp(a_num, b_num)
        else:
            result = cmp(ac, bc)
            if result:
                return result
    return cmp(a_num, b_num) if number_compare else 0


def load_results(lines: Iterable[str]) -> tuple[dict[str, Stats], dict[str, Stats]]:
    """Collect per-iteration averages as ``(aws_results, ring_results)``.

    Lines starting with ``group`` are headers and skipped. Raises
    ``ValueError`` on a malformed line or an unknown library.
    """
    aws_results: dict[str, Stats] = {}
    ring_results: dict[str, Stats] = {}
    for line in lines:
        if line.startswith("group"):
            continue
        components = line.split(",")
        if len(components) != _FIELD_COUNT:
            raise ValueError(
                f"Expected {_FIELD_COUNT} fields, found {len(components)}: {line}"
            )
        test = components[0].strip()
        lib = components[1].strip()
        try:
            time = float(components[5])
        except ValueError:
            raise ValueError(f"Unable to parse time: {line}") from None
        raw_iter = components[7]
        if not raw_iter.isdigit():
            raise ValueError(f"Unable to parse iteration count: {line}")
        avg = time / float(int(raw_iter))
        if lib == "AWS-LC":
            target = aws_results
        elif lib == "Ring":
            target = ring_results
        else:
            raise ValueError(f"Unrecognized library: {lib}")
        target.setdefault(test, Stats()).samples.append(avg)
    return aws_results, ring_results


def _u8(text: str) -> int:
    value = int(text)
    if not 0 <= value <= 255:
        raise argparse.ArgumentTypeError(f"{text} is not in 0..255")
    return value


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarise benchmark CSV results for AWS-LC and Ring."
    )
    parser.add_argument("csv_file", type=Path, help="CSV file to operate on")
    parser.add_argument("--median", action="store_true", help="Compute the median")
    parser.add_argument("--max", action="store_true", help="Compute the maximum")
    parser.add_argument("--min", action="store_true", help="Compute the minimum")
    parser.add_argument(
        "-p", "--percentile", action="append", type=_u8, default=[],
        help="Compute percentile",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Turn debugging information on"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _parser()
    args = parser.parse_args(argv)
    if not (args.median or args.max or args.min or args.percentile):
        parser.error("one of --median, --max, --min or --percentile is required")
    report = Report(
        min=args.min,
        median=args.median,
        max=args.max,
        percentiles=list(args.percentile),
        verbose=args.verbose,
    )
    try:
        contents = args.csv_file.read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Unable to open file: '{args.csv_file}': {exc}", file=sys.stderr)
        return 1
    try:
        aws_results, ring_results = load_results(contents.splitlines())
        rows = []
        for test in sorted(aws_results, key=cmp_to_key(numerical_string_compare)):
            if test not in ring_results:
                raise ValueError(f"No Ring results for {test}")
            aws_stats = aws_results[test].finalize()
            ring_stats = ring_results[test].finalize()
            rows.append(f"{test}{report.data_line(aws_stats, ring_stats)}")
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    print(f"Test{report.header_line()}")
    for row in rows:
        print(row)
    return 0
"""Set-associative cache simulator with LRU replacement, driven by memory traces."""

from __future__ import annotations

import enum
import getopt
import sys
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Sequence

_WORD_BITS = 32


def _to_int32(value: int) -> int:
    """Reinterpret the low 32 bits of ``value`` as a signed integer."""
    value &= (1 << _WORD_BITS) - 1
    return value - (1 << _WORD_BITS) if value >> (_WORD_BITS - 1) else value


class AccessResult(enum.Enum):
    """Outcome of a single cache access."""

    HIT = "hit"
    MISS = "miss"
    MISS_EVICTION = "miss eviction"


class TraceRecord(NamedTuple):
    """One parsed line of a memory trace."""

    operation: str
    address: int
    size: int


@dataclass(frozen=True)
class Summary:
    """Totals collected by a simulation run."""

    hits: int
    misses: int
    evictions: int

    def __str__(self) -> str:
        return f"hits:{self.hits} misses:{self.misses} evictions:{self.evictions}"


def parse_trace_line(line: str) -> TraceRecord | None:
    """Parse a trace line such as ``" L 10,1"``; return None for a blank line."""
    text = line.strip()
    if not text:
        return None
    parts = text.split(None, 1)
    if len(parts) != 2 or len(parts[0]) != 1:
        raise ValueError(f"malformed trace line: {line!r}")
    operation, rest = parts
    address_text, sep, size_text = rest.partition(",")
    try:
        address = int(address_text.strip(), 16)
        size = int(size_text.strip()) if sep else 0
    except ValueError:
        raise ValueError(f"malformed trace line: {line!r}") from None
    return TraceRecord(operation, address, size)


class CacheSimulator:
    """A cache of ``2**set_bits`` sets, each holding ``lines_per_set`` lines."""

    def __init__(self, set_bits: int, lines_per_set: int, block_bits: int) -> None:
        if set_bits < 0 or block_bits < 0:
            raise ValueError("set and block bits must not be negative")
        if lines_per_set < 1:
            raise ValueError("a set needs at least one line")
        self.set_bits = set_bits
        self.lines_per_set = lines_per_set
        self.block_bits = block_bits
        # Each set maps a resident tag to the time it was last used.
        self._sets: list[dict[int, int]] = [{} for _ in range(1 << set_bits)]
        self._clock = 0
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def _tick(self) -> int:
        self._clock += 1
        return self._clock

    def access(self, address: int) -> AccessResult:
        """Simulate one access to ``address`` and report what happened."""
        addr = _to_int32(address)
        set_index = (addr >> self.block_bits) & ((1 << self.set_bits) - 1)
        tag = addr >> (self.set_bits + self.block_bits)
        lines = self._sets[set_index]

        if tag in lines:
            self.hits += 1
            lines[tag] = self._tick()
            return AccessResult.HIT

        self.misses += 1
        if len(lines) < self.lines_per_set:
            lines[tag] = self._tick()
            return AccessResult.MISS

        self.evictions += 1
        victim = min(lines, key=lines.__getitem__)
        del lines[victim]
        lines[tag] = self._tick()
        return AccessResult.MISS_EVICTION

    def run_trace(self, lines: Iterable[str]) -> Summary:
        """Feed every line of a trace through the cache and return the totals."""
        for line in lines:
            record = parse_trace_line(line)
            if record is None or record.operation == "I":
                continue
            self.access(record.address)
            if record.operation == "M":
                self.access(record.address)
        return self.summary()

    def summary(self) -> Summary:
        """Return the hit, miss and eviction counts so far."""
        return Summary(self.hits, self.misses, self.evictions)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the simulator from the command line: -s <s> -E <E> -b <b> -t <file>."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        options, _ = getopt.getopt(args, "s:E:b:t:")
    except getopt.GetoptError as exc:
        print(exc, file=sys.stderr)
        return 1

    set_bits = lines_per_set = block_bits = 0
    trace_path = None
    try:
        for flag, value in options:
            if flag == "-s":
                set_bits = int(value)
            elif flag == "-E":
                lines_per_set = int(value)
            elif flag == "-b":
                block_bits = int(value)
            elif flag == "-t":
                trace_path = value
        simulator = CacheSimulator(set_bits, lines_per_set, block_bits)
    except ValueError as exc:
        print(f"invalid argument: {exc}", file=sys.stderr)
        return 1

    if trace_path is None:
        print("missing trace file (-t)", file=sys.stderr)
        return 1

    try:
        with open(trace_path, encoding="ascii") as trace:
            summary = simulator.run_trace(trace)
    except OSError as exc:
        print(f"{trace_path}: {exc.strerror}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1

    print(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
# archlab

Small tools for exploring how a computer system works underneath. The
package has no third-party dependencies.

- **`archlab.cachesim`**: a set-associative cache simulator with LRU
  replacement. It replays memory traces and counts hits, misses and evictions.
- **`archlab.transpose`**: matrix transposes blocked to suit a small
  direct-mapped cache, a plain transpose, and a correctness check.
- **`archlab.bits`**: 32-bit two's-complement integer tricks and bit-level
  operations on single-precision floats.
- **`archlab.allocator`**: a heap allocator with segregated free lists
  (`malloc`, `free`, `realloc`). It works on a simulated heap and comes with a
  consistency checker.
- **`archlab.jobs`** and **`archlab.shell`**: a tiny POSIX shell with job
  control.

## Installation

```
pip install .
```

To also install the test runner, add the `test` extra:

```
pip install ".[test]"
```

## Cache simulator

```
archlab-csim -s 4 -E 1 -b 4 -t trace.txt
```

| Option | Meaning |
| ------ | ------- |
| `-s` | number of set index bits |
| `-E` | number of lines per set |
| `-b` | number of block bits |
| `-t` | trace file |

Trace lines look like ` L 10,4`, ` S 18,4` or ` M 20,4`. The address is in
hexadecimal. Instruction loads (`I`) are skipped, and a modify (`M`) counts as
two accesses. The command prints a line such as
`hits:4 misses:5 evictions:3`. It exits with status 1 when an option is bad,
the trace file is missing or cannot be read, or a trace line is malformed.

You can also use the simulator from Python:

```python
from archlab.cachesim import CacheSimulator, parse_trace_line

sim = CacheSimulator(set_bits=4, lines_per_set=1, block_bits=4)
sim.access(0x10)                 # AccessResult.MISS
with open("trace.txt") as trace:
    summary = sim.run_trace(trace)
print(summary.hits, summary.misses, summary.evictions)

parse_trace_line(" L 10,1")      # TraceRecord(operation='L', address=16, size=1)
```

## Transpose

```python
from archlab.transpose import transpose_submit, transpose_simple, is_transpose

a = [[r * 32 + c for c in range(32)] for r in range(32)]
b = transpose_submit(a)
assert is_transpose(a, b)
```

`transpose_submit` handles 32×32 and 64×64 matrices, and matrices with 67 rows
of 61 columns. For any other shape it raises `ValueError`.
`transpose_simple` transposes any rectangular matrix. `registered_functions()`
returns each transpose function paired with its description.

## Bit routines

Integer results are signed 32-bit values. The float routines take and return
raw IEEE-754 single-precision bit patterns.

```python
from archlab import bits

bits.get_byte(0x12345678, 1)      # 0x56
bits.bit_mask(5, 3)               # 0x38
bits.divide_power2(-33, 4)        # -2
bits.float_to_int(0x3FC00000)     # 1
```

The module also provides `bit_nor`, `bang`, `bit_parity`, `tmax`,
`is_negative`, `fits_bits`, `conditional`, `ez_three_fourths`,
`sign_mag_to_twos_comp`, `float_abs_val` and `float_scale4`. If an argument is
out of its documented range, the function raises `ValueError`.

## Allocator

```python
from archlab.allocator import MemoryHeap, Allocator

heap = MemoryHeap(max_size=20 * (1 << 20))
alloc = Allocator(heap)
p = alloc.malloc(100)            # 8-byte aligned address within the heap
p = alloc.realloc(p, 200)
heap.write_bytes(p, b"data")
alloc.free(p)
alloc.check()                    # raises HeapCorruptionError if inconsistent
```

Behaviour at the edges:

- `malloc(0)` returns `None`.
- `realloc(None, n)` behaves like `malloc(n)`.
- When `realloc` grows a block, it reserves extra room so that later small
  growths can stay in place.
- If the simulated heap cannot grow any further, `OutOfMemoryError` is raised.
- Freeing or reallocating an address that is not an allocated block raises
  `ValueError`.

## Shell

```
archlab-tsh        # interactive, prints the "tsh> " prompt
archlab-tsh -p     # no prompt, handy for scripted input
archlab-tsh -v     # report each job as it is added
archlab-tsh -h     # print usage
```

Built-in commands:

- `jobs` lists the jobs.
- `bg <pid|%jid>` resumes a job in the background.
- `fg <pid|%jid>` resumes a job in the foreground and waits for it.
- `quit` exits the shell.

Any other line runs a program in a new process group. A trailing `&` runs it
in the background. Ctrl-C and Ctrl-Z are forwarded to the foreground job. The
shell reports any job that is ended by a signal or stopped. SIGQUIT terminates
the shell.

Within Python, `archlab.shell.Shell` evaluates single command lines.
`archlab.jobs` provides the `JobTable` bookkeeping and the `parse_line`
command-line splitter. In `parse_line`, single quotes group an argument.

### What the shell does not do

- Programs are started by path: a bare name is looked up in the current
  directory, and `PATH` is not searched.
- Programs run with an empty environment.
- There are no pipes, redirections, variables or scripting.
- The shell keeps at most 16 jobs at a time.
- It needs a POSIX system.
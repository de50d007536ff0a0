"""Segregated free-list memory allocator over a simulated, growable heap."""

from __future__ import annotations

import struct

WSIZE = 4
DSIZE = 8
ALIGNMENT = 8
INIT_CHUNK_SIZE = 1 << 6
CHUNK_SIZE = 1 << 12
LIST_COUNT = 20
REALLOC_BUFFER = 1 << 7
DEFAULT_MAX_HEAP = 20 * (1 << 20)

_NULL = 0
_WORD = struct.Struct("<I")


class OutOfMemoryError(MemoryError):
    """Raised when the simulated heap cannot grow any further."""


class HeapCorruptionError(RuntimeError):
    """Raised when a consistency check of the heap fails."""


def _align(size: int) -> int:
    return (size + ALIGNMENT - 1) & ~0x7


def _adjusted_size(size: int) -> int:
    """Block size needed for a payload of ``size`` bytes, header and footer included."""
    return 2 * DSIZE if size <= DSIZE else _align(size + DSIZE)


def _pack(size: int, allocated: bool) -> int:
    return size | int(allocated)


class MemoryHeap:
    """A contiguous byte region that grows from address 0 up to ``max_size``."""

    def __init__(self, max_size: int = DEFAULT_MAX_HEAP) -> None:
        if max_size < 0:
            raise ValueError("heap size must not be negative")
        self.max_size = max_size
        self._memory = bytearray(max_size)
        self._brk = 0

    def sbrk(self, increment: int) -> int:
        """Grow the heap by ``increment`` bytes and return the old break address."""
        if increment < 0:
            raise ValueError("the heap cannot shrink")
        if self._brk + increment > self.max_size:
            raise OutOfMemoryError(
                f"cannot grow heap by {increment} bytes: "
                f"{self.max_size - self._brk} bytes left"
            )
        old_brk = self._brk
        self._brk += increment
        return old_brk

    def heap_lo(self) -> int:
        """Address of the first heap byte."""
        return 0

    def heap_hi(self) -> int:
        """Address of the last heap byte (-1 while the heap is empty)."""
        return self._brk - 1

    def _check(self, address: int, size: int) -> None:
        if address < 0 or size < 0 or address + size > self._brk:
            raise IndexError(f"access of {size} bytes at {address} is outside the heap")

    def read_word(self, address: int) -> int:
        """Read an unsigned little-endian 32-bit word."""
        self._check(address, WSIZE)
        return _WORD.unpack_from(self._memory, address)[0]

    def write_word(self, address: int, value: int) -> None:
        """Write an unsigned little-endian 32-bit word."""
        if not 0 <= value <= 0xFFFFFFFF:
            raise ValueError(f"word value out of range: {value}")
        self._check(address, WSIZE)
        _WORD.pack_into(self._memory, address, value)

    def read_bytes(self, address: int, size: int) -> bytes:
        """Return ``size`` bytes starting at ``address``."""
        self._check(address, size)
        return bytes(self._memory[address:address + size])

    def write_bytes(self, address: int, data: bytes) -> None:
        """Store ``data`` starting at ``address``."""
        self._check(address, len(data))
        self._memory[address:address + len(data)] = data


class Allocator:
    """Allocator with boundary tags and size-segregated explicit free lists.

    Block pointers are payload addresses within the heap. Each block has a
    one-word header and footer holding its size and an allocated bit; a free
    block keeps the addresses of its list neighbours in its first two words.
    """

    def __init__(self, heap: MemoryHeap) -> None:
        self.heap = heap
        self._lists = [_NULL] * LIST_COUNT
        start = heap.sbrk(4 * WSIZE)
        self._heap_start = start
        heap.write_word(start, 0)
        heap.write_word(start + WSIZE, _pack(DSIZE, True))
        heap.write_word(start + 2 * WSIZE, _pack(DSIZE, True))
        heap.write_word(start + 3 * WSIZE, _pack(0, True))
        self._extend_heap(INIT_CHUNK_SIZE)

    # Word-level helpers ---------------------------------------------------

    def _size_at(self, address: int) -> int:
        return self.heap.read_word(address) & ~0x7

    def _alloc_at(self, address: int) -> bool:
        return bool(self.heap.read_word(address) & 0x1)

    def _set_block(self, ptr: int, size: int, allocated: bool) -> None:
        """Write matching header and footer words for the block at ``ptr``."""
        word = _pack(size, allocated)
        self.heap.write_word(ptr - WSIZE, word)
        self.heap.write_word(ptr + size - DSIZE, word)

    def _next(self, ptr: int) -> int:
        return ptr + self._size_at(ptr - WSIZE)

    def _prev(self, ptr: int) -> int:
        return ptr - self._size_at(ptr - DSIZE)

    def _pred(self, ptr: int) -> int:
        return self.heap.read_word(ptr)

    def _succ(self, ptr: int) -> int:
        return self.heap.read_word(ptr + WSIZE)

    def _set_pred(self, ptr: int, value: int) -> None:
        self.heap.write_word(ptr, value)

    def _set_succ(self, ptr: int, value: int) -> None:
        self.heap.write_word(ptr + WSIZE, value)

    # Free lists -----------------------------------------------------------

    @staticmethod
    def _list_index(size: int) -> int:
        """List n holds blocks of 2**n to 2**(n+1)-1 bytes; the last takes the rest."""
        index = 0
        while index < LIST_COUNT - 1 and size > 1:
            size >>= 1
            index += 1
        return index

    def _insert_node(self, ptr: int, size: int) -> None:
        index = self._list_index(size)
        head = self._lists[index]
        self._set_pred(ptr, head)
        self._set_succ(ptr, _NULL)
        if head != _NULL:
            self._set_succ(head, ptr)
        self._lists[index] = ptr

    def _delete_node(self, ptr: int) -> None:
        index = self._list_index(self._size_at(ptr - WSIZE))
        pred, succ = self._pred(ptr), self._succ(ptr)
        if pred != _NULL:
            if succ != _NULL:
                self._set_succ(pred, succ)
                self._set_pred(succ, pred)
            else:
                self._set_succ(pred, _NULL)
                self._lists[index] = pred
        elif succ != _NULL:
            self._set_pred(succ, _NULL)
        else:
            self._lists[index] = _NULL

    # Block management -----------------------------------------------------

    def _extend_heap(self, size: int) -> int:
        asize = _align(size)
        ptr = self.heap.sbrk(asize)
        self._set_block(ptr, asize, False)
        self.heap.write_word(ptr + asize - WSIZE, _pack(0, True))
        self._insert_node(ptr, asize)
        return self._coalesce(ptr)

    def _coalesce(self, ptr: int) -> int:
        prev_alloc = self._alloc_at(self._prev(ptr) - WSIZE)
        next_alloc = self._alloc_at(self._next(ptr) - WSIZE)
        size = self._size_at(ptr - WSIZE)

        if prev_alloc and next_alloc:
            return ptr

        self._delete_node(ptr)
        if not prev_alloc:
            prev = self._prev(ptr)
            self._delete_node(prev)
            size += self._size_at(prev - WSIZE)
        if not next_alloc:
            nxt = self._next(ptr)
            self._delete_node(nxt)
            size += self._size_at(nxt - WSIZE)
        if not prev_alloc:
            ptr = self._prev(ptr)

        self._set_block(ptr, size, False)
        self._insert_node(ptr, size)
        return ptr

    def _place(self, ptr: int, asize: int) -> int:
        block_size = self._size_at(ptr - WSIZE)
        remainder = block_size - asize
        self._delete_node(ptr)

        if remainder <= 2 * DSIZE:
            self._set_block(ptr, block_size, True)
            return ptr
        if asize >= 100:
            # Large requests go to the end of the block, keeping small ones together.
            self._set_block(ptr, remainder, False)
            allocated = ptr + remainder
            self._set_block(allocated, asize, True)
            self._insert_node(ptr, remainder)
            return allocated
        self._set_block(ptr, asize, True)
        rest = ptr + asize
        self._set_block(rest, remainder, False)
        self._insert_node(rest, remainder)
        return ptr

    def _find_fit(self, asize: int) -> int | None:
        search = asize
        for index, head in enumerate(self._lists):
            if index == LIST_COUNT - 1 or (search <= 1 and head != _NULL):
                block = head
                while block != _NULL and asize > self._size_at(block - WSIZE):
                    block = self._pred(block)
                if block != _NULL:
                    return block
            search >>= 1
        return None

    def _require_allocated(self, ptr: int) -> None:
        first = self._heap_start + 2 * DSIZE
        if (
            not first <= ptr <= self.heap.heap_hi()
            or (ptr - self._heap_start) % ALIGNMENT
            or not self._alloc_at(ptr - WSIZE)
            or self._size_at(ptr - WSIZE) == 0
        ):
            raise ValueError(f"{ptr} is not an allocated block")

    # Public interface -----------------------------------------------------

    def block_size(self, ptr: int) -> int:
        """Total size of the block at ``ptr``, header and footer included."""
        return self._size_at(ptr - WSIZE)

    def malloc(self, size: int) -> int | None:
        """Allocate ``size`` bytes; return an 8-byte aligned address, or None for 0."""
        if size < 0:
            raise ValueError("size must not be negative")
        if size == 0:
            return None
        asize = _adjusted_size(size)
        block = self._find_fit(asize)
        if block is None:
            block = self._extend_heap(max(asize, CHUNK_SIZE))
        return self._place(block, asize)

    def free(self, ptr: int) -> None:
        """Release the block at ``ptr`` and merge it with free neighbours."""
        self._require_allocated(ptr)
        size = self._size_at(ptr - WSIZE)
        self._set_block(ptr, size, False)
        self._insert_node(ptr, size)
        self._coalesce(ptr)

    def realloc(self, ptr: int | None, size: int) -> int | None:
        """Resize the block at ``ptr`` to hold ``size`` bytes, growing in place if possible.

        Growth reserves an extra buffer so that repeated small growths stay in
        place. A size of 0 returns None and leaves the block untouched.
        """
        if ptr is None:
            return self.malloc(size)
        if size < 0:
            raise ValueError("size must not be negative")
        if size == 0:
            return None
        self._require_allocated(ptr)

        new_size = _adjusted_size(size) + REALLOC_BUFFER
        current = self._size_at(ptr - WSIZE)
        if current >= new_size:
            return ptr

        nxt = self._next(ptr)
        next_size = self._size_at(nxt - WSIZE)
        next_free = not self._alloc_at(nxt - WSIZE)
        if next_free or next_size == 0:
            remainder = current + next_size - new_size
            at_end = next_size == 0 or self._size_at(nxt + next_size - WSIZE) == 0
            if remainder >= 0 or at_end:
                if remainder < 0:
                    extension = max(-remainder, CHUNK_SIZE)
                    self._extend_heap(extension)
                    remainder += extension
                self._delete_node(nxt)
                self._set_block(ptr, new_size + remainder, True)
                return ptr

        new_ptr = self.malloc(new_size - DSIZE)
        data = self.heap.read_bytes(ptr, min(size, current - DSIZE))
        self.heap.write_bytes(new_ptr, data)
        self.free(ptr)
        return new_ptr

    def check(self) -> None:
        """Verify the free lists and block boundary tags; raise HeapCorruptionError."""
        for head in self._lists:
            ptr = head
            while ptr != _NULL:
                if self._alloc_at(ptr - WSIZE):
                    raise HeapCorruptionError("allocated block in the free list")
                if not self._alloc_at(self._next(ptr) - WSIZE):
                    raise HeapCorruptionError("two consecutive free blocks")
                ptr = self._pred(ptr)

        ptr = self._heap_start + DSIZE
        while self._size_at(ptr - WSIZE) > 0:
            footer = ptr + self._size_at(ptr - WSIZE) - DSIZE
            if self.heap.read_word(ptr - WSIZE) != self.heap.read_word(footer):
                raise HeapCorruptionError("block's header and footer do not match")
            ptr = self._next(ptr)

        if not self._alloc_at(ptr - WSIZE):
            raise HeapCorruptionError("heap's epilogue block is not allocated")
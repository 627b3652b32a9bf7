import struct
import uuid
from enum import IntEnum

# Error codes from libndr.h
class NDR_ERR(IntEnum):
    SUCCESS = 0
    BUFSIZE = 1
    TOKEN = 2
    ALLOC = 3
    ARRAY_SIZE = 4
    INVALID_POINTER = 5
    UNREAD_BYTES = 6


class NDRError(ValueError):
    def __init__(self, code: NDR_ERR, msg: str):
        super().__init__(f"NDR_ERR_{code.name}: {msg}")
        self.code = code


class TruncatedError(NDRError):
    """A fixed-size field runs past the end of the buffer."""

    def __init__(self, need: int, off: int, size: int):
        super().__init__(NDR_ERR.BUFSIZE,
                         f"need {need} bytes at offset {off}, size={size}")
        self.need = need
        self.off = off
        self.size = size


class NDRPush:
    """Little-endian NDR writer. Offsets are relative to the start of the PDU."""

    def __init__(self):
        self.buf = bytearray()
        self.off = 0

    def _ensure(self, n):
        need = self.off + n - len(self.buf)
        if need > 0:
            self.buf.extend(b'\x00' * need)

    def align(self, n):
        """Align offset to n-byte boundary, adding zero padding."""
        pad = (-self.off) & (n - 1)
        if pad:
            self._ensure(pad)
            self.off += pad
        return pad

    def trailer_align4(self):
        return self.align(4)

    def u8(self, v):
        self._ensure(1)
        self.buf[self.off] = v & 0xFF
        self.off += 1

    def u16(self, v):
        self.align(2)
        self._ensure(2)
        struct.pack_into('<H', self.buf, self.off, v & 0xFFFF)
        self.off += 2

    def u32(self, v):
        self.align(4)
        self._ensure(4)
        struct.pack_into('<I', self.buf, self.off, v & 0xFFFFFFFF)
        self.off += 4

    def raw(self, b: bytes):
        """Push raw bytes without alignment."""
        n = len(b)
        self._ensure(n)
        self.buf[self.off:self.off + n] = b
        self.off += n

    def _patch(self, fmt: str, off: int, v: int):
        size = struct.calcsize(fmt)
        if off + size > len(self.buf):
            raise TruncatedError(size, off, len(self.buf))
        struct.pack_into(fmt, self.buf, off, v)

    def patch_u16(self, off: int, v: int):
        """Overwrite an already written u16 in place."""
        self._patch('<H', off, v & 0xFFFF)

    def patch_u32(self, off: int, v: int):
        self._patch('<I', off, v & 0xFFFFFFFF)

    def __len__(self):
        return len(self.buf)

    def getvalue(self) -> bytes:
        return bytes(self.buf)


class NDRPull:
    """
    Read cursor over an NDR stream.

    Every fixed-width read is bounds-checked and raises TruncatedError.
    skip() and align() only move the cursor, so it may end up past the
    end of the buffer; callers check `overrun` for that.
    """

    def __init__(self, data: bytes, off: int = 0):
        self.b = memoryview(data)
        self.off = off

    @property
    def remaining(self) -> int:
        return len(self.b) - self.off

    @property
    def overrun(self) -> bool:
        return self.off > len(self.b)

    def seek(self, off: int):
        self.off = off

    def skip(self, n: int):
        self.off += n

    def align(self, n):
        """Align offset to n-byte boundary."""
        pad = (-self.off) & (n - 1)
        self.off += pad
        return pad

    def _check_bounds(self, n, off=None):
        off = self.off if off is None else off
        if off < 0 or off + n > len(self.b):
            raise TruncatedError(n, off, len(self.b))

    def u8(self):
        self._check_bounds(1)
        v = self.b[self.off]
        self.off += 1
        return v

    def u16(self):
        self.align(2)
        self._check_bounds(2)
        v = struct.unpack_from('<H', self.b, self.off)[0]
        self.off += 2
        return v

    def u32(self):
        self.align(4)
        self._check_bounds(4)
        v = struct.unpack_from('<I', self.b, self.off)[0]
        self.off += 4
        return v

    def u32_at(self, off: int) -> int:
        """Read a u32 at an absolute offset without moving the cursor."""
        self._check_bounds(4, off)
        return struct.unpack_from('<I', self.b, off)[0]

    def raw(self, n):
        """Pull n raw bytes without alignment."""
        self._check_bounds(n)
        v = self.b[self.off:self.off + n].tobytes()
        self.off += n
        return v


# --- GUID / syntax identifiers ---
def push_guid(ndr: NDRPush, g):
    """
    GUID on the wire: Data1/Data2/Data3 little-endian, Data4 as is.
    That is exactly uuid.UUID.bytes_le, not the textual byte order.
    """
    if not isinstance(g, uuid.UUID):
        g = uuid.UUID(g)
    ndr.raw(g.bytes_le)


def push_syntax(ndr: NDRPush, uuidtup):
    """p_syntax_id_t: GUID + u16 major + u16 minor."""
    guid, version = uuidtup
    major, _, minor = version.partition('.')
    push_guid(ndr, guid)
    ndr.u16(int(major))
    ndr.u16(int(minor or 0))

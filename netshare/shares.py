"""
NetShareEnumAll level 1 response decoder.

Layout of the response PDU as seen from byte 0 of the DCE header::

    [0:24]   response header (common header + alloc_hint/ctx/cancel)
    [24:44]  Level, union switch, container ptr, EntriesRead, Buffer ptr
    [44:48]  conformance of SHARE_INFO_1[] (== number of entries)
    [48:]    SHARE_INFO_1[count]: netname ptr(u32), type(u32), remark ptr(u32)
             then per entry: netname string, remark string
             (conformant/varying, see pull_conformant_varying_string)

The referent pointers are never followed; a non-NULL pointer only means
that the string shows up, in order, after the fixed-size array.
"""
import logging
from dataclasses import dataclass
from typing import List

from netshare.constants import (
    SHARE_ARRAY_OFFSET,
    SHARE_COUNT_OFFSET,
    SHARE_INFO_1_SIZE,
    SHARE_INFO_1_TYPE_OFFSET,
)
from netshare.ndr import NDRPull, TruncatedError
from netshare.status import STYPE_UNKNOWN, is_disk_share, share_type_name

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShareRecord:
    name: str
    comment: str


def pull_conformant_varying_string(p: NDRPull) -> str:
    """
    max_count(u32), offset(u32), actual_count(u32), then actual_count
    UTF-16LE code units, the last one being the NUL terminator.
    Leaves the cursor on the next 4-byte boundary, which may be past the
    end of the buffer.
    """
    p.u32()                             # max_count
    p.u32()                             # offset, always 0
    actual = p.u32()
    if actual * 2 > p.remaining:
        raise TruncatedError(actual * 2, p.off, len(p.b))

    s = ""
    if actual > 1:
        s = p.b[p.off:p.off + (actual - 1) * 2].tobytes().decode('utf-16le', errors='replace')
    p.skip(actual * 2)
    p.align(4)
    return s


def _share_type(p: NDRPull, i: int) -> int:
    try:
        return p.u32_at(SHARE_ARRAY_OFFSET + i * SHARE_INFO_1_SIZE + SHARE_INFO_1_TYPE_OFFSET)
    except TruncatedError:
        return STYPE_UNKNOWN


def parse_share_enum_all_level1(data: bytes, include_special: bool = False) -> List[ShareRecord]:
    """
    Decode the SHARE_INFO_1 array of a NetShareEnumAll response.

    Disk shares (type 0) are always kept. With include_special, disk shares
    carrying modifier bits (hidden/admin ``C$``, temporary) are kept too.
    Everything else (print queues, IPC$, devices) is dropped.

    Raises TruncatedError when the count or a string does not fit. If the
    data runs out between entries the entries decoded so far are returned.
    """
    p = NDRPull(data)
    count = p.u32_at(SHARE_COUNT_OFFSET)

    shares = []
    p.seek(SHARE_ARRAY_OFFSET + count * SHARE_INFO_1_SIZE)
    for i in range(count):
        stype = _share_type(p, i)
        name = pull_conformant_varying_string(p)
        comment = pull_conformant_varying_string(p)

        if is_disk_share(stype, include_special):
            shares.append(ShareRecord(name, comment))
        else:
            LOG.debug("[SRVSVC] skip %r type=0x%08x (%s)", name, stype, share_type_name(stype))

        if p.overrun:
            LOG.debug("[SRVSVC] data ends after %d of %d entries", i + 1, count)
            break

    return shares

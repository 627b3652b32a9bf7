import struct

import pytest

from netshare.ndr import NDRPull, TruncatedError
from netshare.shares import ShareRecord, parse_share_enum_all_level1, pull_conformant_varying_string
from netshare.status import STYPE_DISKTREE, STYPE_IPC, STYPE_PRINTQ, STYPE_SPECIAL, STYPE_TEMPORARY


def _hex(s: str) -> bytes:
    return bytes.fromhex(' '.join(s.split()))


# response header + InfoStruct up to the array conformance, count patched in
RESPONSE_HEAD = _hex(
    "05 00 02 03 10 00 00 00 00 00 00 00 00 00 00 00"
    "00 00 00 00 00 00 00 00"
    # Level=1, switch=1, ctr referent, EntriesRead, Buffer referent
    "01 00 00 00 01 00 00 00 00 00 02 00 00 00 00 00 04 00 02 00"
    # max_count of SHARE_INFO_1[]
    "00 00 00 00"
)

# one disk share "data" with an empty comment
SINGLE_DATA = _hex(
    "05 00 02 03 10 00 00 00 64 00 00 00 00 00 00 00"
    "4c 00 00 00 00 00 00 00"
    "01 00 00 00 01 00 00 00 00 00 02 00 01 00 00 00 04 00 02 00"
    "01 00 00 00"
    # SHARE_INFO_1: netname ptr, type=STYPE_DISKTREE, remark ptr
    "08 00 02 00 00 00 00 00 0c 00 02 00"
    # "data": max 5, offset 0, actual 5, d a t a NUL + pad
    "05 00 00 00 00 00 00 00 05 00 00 00 64 00 61 00 74 00 61 00 00 00 00 00"
    # "": max 1, offset 0, actual 1, NUL + pad
    "01 00 00 00 00 00 00 00 01 00 00 00 00 00 00 00"
)


def _string(s: str) -> bytes:
    w = (s + '\x00').encode('utf-16le')
    n = len(w) // 2
    b = struct.pack('<III', n, 0, n) + w
    if n % 2:
        b += b'\x00\x00'
    return b


def _response(entries, count=None, status=0) -> bytes:
    """entries: [(name, type, comment)] -> full NetShareEnumAll response PDU."""
    if count is None:
        count = len(entries)
    body = bytearray(RESPONSE_HEAD)
    struct.pack_into('<I', body, 36, len(entries))
    struct.pack_into('<I', body, 44, count)
    ref = 0x00020008
    for _, stype, _ in entries:
        body += struct.pack('<III', ref, stype, ref + 4)
        ref += 8
    for name, _, comment in entries:
        body += _string(name) + _string(comment)
    # TotalEntries, ResumeHandle referent + value, WERROR
    body += struct.pack('<IIII', len(entries), 0x00020000 + ref, 0, status)
    struct.pack_into('<H', body, 8, len(body))
    struct.pack_into('<I', body, 16, len(body) - 24)
    return bytes(body)


WINDOWS_SHARES = [
    ("ADMIN$", STYPE_DISKTREE | STYPE_SPECIAL, "Remote Admin"),
    ("C$", STYPE_DISKTREE | STYPE_SPECIAL, "Default share"),
    ("data", STYPE_DISKTREE, "Team data"),
    ("IPC$", STYPE_IPC | STYPE_SPECIAL, "Remote IPC"),
    ("HP4050", STYPE_PRINTQ, "2nd floor"),
    ("scratch", STYPE_DISKTREE | STYPE_TEMPORARY, ""),
    ("data", STYPE_DISKTREE, "duplicate"),
]


def test_single_entry():
    assert parse_share_enum_all_level1(SINGLE_DATA) == [ShareRecord("data", "")]


def test_helper_matches_dump():
    # frag_len/alloc_hint differ: the helper also appends the trailer
    assert _response([("data", STYPE_DISKTREE, "")])[24:100] == SINGLE_DATA[24:]


def test_empty():
    data = _response([])
    assert parse_share_enum_all_level1(data[:48]) == []
    assert parse_share_enum_all_level1(data, include_special=True) == []


def test_short_header():
    for n in (0, 1, 16, 24, 44, 47):
        with pytest.raises(TruncatedError):
            parse_share_enum_all_level1(SINGLE_DATA[:n])


def test_disk_shares_only():
    shares = parse_share_enum_all_level1(_response(WINDOWS_SHARES))
    assert shares == [
        ShareRecord("data", "Team data"),
        ShareRecord("data", "duplicate"),
    ]


def test_special_shares():
    shares = parse_share_enum_all_level1(_response(WINDOWS_SHARES), include_special=True)
    assert [s.name for s in shares] == ["ADMIN$", "C$", "data", "scratch", "data"]
    assert shares[1] == ShareRecord("C$", "Default share")


def test_high_bits_only_with_special():
    data = _response([("hidden$", 0x80000000, ""), ("odd", 0x01000000, "")])
    assert parse_share_enum_all_level1(data) == []
    assert parse_share_enum_all_level1(data, include_special=True) == [
        ShareRecord("hidden$", ""),
        ShareRecord("odd", ""),
    ]


def test_unicode_names():
    data = _response([("Données", STYPE_DISKTREE, "общая папка"), ("\U0001D11E", STYPE_DISKTREE, "x")])
    assert parse_share_enum_all_level1(data) == [
        ShareRecord("Données", "общая папка"),
        ShareRecord("\U0001D11E", "x"),
    ]


def test_count_larger_than_payload():
    # two entries announced, only the strings of the first one present and
    # the trailing pad of its comment cut off
    data = _response([("data", STYPE_DISKTREE, ""), ("more", STYPE_DISKTREE, "")])
    strings_start = 48 + 2 * 12
    first = len(_string("data")) + len(_string(""))
    cut = data[:strings_start + first - 2]
    shares = parse_share_enum_all_level1(cut)
    assert shares == [ShareRecord("data", "")]


def test_string_body_truncated():
    data = _response([("data", STYPE_DISKTREE, "comment")])
    with pytest.raises(TruncatedError):
        parse_share_enum_all_level1(data[:48 + 12 + 24 + 12 + 4])


def test_comment_uses_its_own_count():
    # short name, comment claiming 20 characters with only two present
    head = _response([("a", STYPE_DISKTREE, "")])[:60]
    data = head + _string("a") + struct.pack('<III', 20, 0, 20) + "hi".encode('utf-16le')
    with pytest.raises(TruncatedError):
        parse_share_enum_all_level1(data)


def test_zero_actual_count():
    p = NDRPull(struct.pack('<III', 0, 0, 0))
    assert pull_conformant_varying_string(p) == ""
    assert p.off == 12


def test_string_cursor():
    raw = _string("data") + _string("ab")
    p = NDRPull(raw)
    assert pull_conformant_varying_string(p) == "data"
    assert p.off == 24
    assert pull_conformant_varying_string(p) == "ab"
    assert p.off == len(raw)
    assert not p.overrun


def test_records_are_frozen():
    rec = ShareRecord("data", "")
    with pytest.raises(AttributeError):
        rec.name = "other"

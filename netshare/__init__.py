"""Minimal srvsvc NetShareEnumAll client over SMB named pipes."""

from netshare.ndr import NDRError, TruncatedError
from netshare.pdu import build_bind_pdu, build_netshareenumall_request
from netshare.shares import ShareRecord, parse_share_enum_all_level1

__all__ = [
    "NDRError",
    "ShareRecord",
    "TruncatedError",
    "build_bind_pdu",
    "build_netshareenumall_request",
    "parse_share_enum_all_level1",
]

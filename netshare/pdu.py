"""
Outbound DCE/RPC PDUs for the srvsvc pipe (bind + NetrShareEnum request)
and the few inbound envelope fields the caller needs to look at.

Everything here is pure: bytes in, bytes out.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from netshare.constants import (
    ALLOC_HINT_OFFSET,
    AUTH_PAD_LEN_OFFSET,
    BIND_CALL_ID,
    DCERPC_HEADER_LEN,
    DCERPC_PTYPE_BIND,
    DCERPC_PTYPE_BIND_ACK,
    DCERPC_PTYPE_REQUEST,
    DREP_LE,
    FRAG_LEN_OFFSET,
    MAX_FRAG,
    NDR32_TUP,
    PFC_FIRST,
    PFC_LAST,
    REQUEST_CALL_ID,
    REQUEST_HEADER_LEN,
    RESPONSE_HEADER_LEN,
    RPC_VERS,
    RPC_VERS_MINOR,
    SEC_TRAILER_LEN,
    SRVSVC_OPNUM_NetrShareEnum,
    SRVSVC_TUP,
)
from netshare.ndr import NDR_ERR, NDRError, NDRPull, NDRPush, push_syntax

LOG = logging.getLogger(__name__)


def dce_header(ptype: int, call_id: int) -> NDRPush:
    """
    Start a PDU with the 16-byte common header.
    frag_len is left at 0 and must be patched with set_frag_len().
    """
    ndr = NDRPush()
    ndr.u8(RPC_VERS)
    ndr.u8(RPC_VERS_MINOR)
    ndr.u8(ptype)
    ndr.u8(PFC_FIRST | PFC_LAST)
    ndr.raw(DREP_LE)
    ndr.u16(0)          # frag_len
    ndr.u16(0)          # auth_len
    ndr.u32(call_id)
    return ndr


def set_frag_len(ndr: NDRPush) -> bytes:
    """Patch frag_len with the final size. Nothing may be appended afterwards."""
    ndr.patch_u16(FRAG_LEN_OFFSET, len(ndr))
    return ndr.getvalue()


def build_bind_pdu() -> bytes:
    """rpcconn_bind_hdr_t with a single context: srvsvc v3.0 over NDR32."""
    ndr = dce_header(DCERPC_PTYPE_BIND, BIND_CALL_ID)
    ndr.u16(MAX_FRAG)   # max_xmit_frag
    ndr.u16(MAX_FRAG)   # max_recv_frag
    ndr.u32(0)          # assoc_group_id

    # p_context_elem_t: n_context_elem(u8) + reserved(u8) + reserved2(u16)
    ndr.u32(1)
    # p_cont_elem_t: p_cont_id(u16) + n_transfer_syn(u8) + reserved(u8)
    ndr.u16(0)
    ndr.u16(1)
    push_syntax(ndr, SRVSVC_TUP)
    push_syntax(ndr, NDR32_TUP)

    return set_frag_len(ndr)


def _push_server_unc(ndr: NDRPush, server_name: str):
    """
    [in, string, unique] SRVSVC_HANDLE ServerName:
      referent, max_count, offset, actual_count, UTF-16LE + NUL, align4
    """
    w = server_name.encode('utf-16le')
    count = len(w) // 2 + 1             # code units incl. NUL
    ndr.u32(1)                          # referent id
    ndr.u32(count)                      # max_count
    ndr.u32(0)                          # offset
    ndr.u32(count)                      # actual_count
    ndr.raw(w + b'\x00\x00')
    # odd count leaves the stream 2 bytes off a 4-byte boundary
    ndr.trailer_align4()


def build_netshareenumall_request(server_name: str, level: int = 1) -> bytes:
    """
    NetrShareEnum (opnum 15) asking for the whole list from the start.
    Only level 1 responses are understood by netshare.shares.
    """
    ndr = dce_header(DCERPC_PTYPE_REQUEST, REQUEST_CALL_ID)
    ndr.u32(0)                          # alloc_hint, set below
    ndr.u16(0)                          # p_cont_id
    ndr.u16(SRVSVC_OPNUM_NetrShareEnum)

    _push_server_unc(ndr, server_name)

    # LPSHARE_ENUM_STRUCT InfoStruct
    ndr.u32(level)                      # Level
    ndr.u32(level)                      # ShareInfo union switch
    ndr.u32(1)                          # referent id of the container
    ndr.u32(0)                          # EntriesRead
    ndr.u32(0)                          # NULL Buffer
    ndr.u32(0xFFFFFFFF)                 # PreferedMaximumLength
    ndr.u32(1)                          # referent id of ResumeHandle
    ndr.u32(0)                          # ResumeHandle

    ndr.patch_u32(ALLOC_HINT_OFFSET, len(ndr) - REQUEST_HEADER_LEN)
    return set_frag_len(ndr)


# ---- inbound ----
def parse_ncacn_header(pdu: bytes) -> dict:
    p = NDRPull(pdu)
    hdr = {
        'rpc_vers': p.u8(),
        'rpc_minor': p.u8(),
        'ptype': p.u8(),
        'flags': p.u8(),
        'drep': p.raw(4),
    }
    hdr['frag_len'] = p.u16()
    hdr['auth_len'] = p.u16()
    hdr['call_id'] = p.u32()
    return hdr


@dataclass(frozen=True)
class BindAck:
    max_xmit: int
    max_recv: int
    assoc_group: int
    sec_addr: bytes
    # (result, reason, transfer_syntax 20 bytes)
    results: List[Tuple[int, int, bytes]] = field(default_factory=list)


def parse_bind_ack(pdu: bytes) -> BindAck:
    """
    rpcconn_bind_ack_hdr_t:
      max_xmit(u16) max_recv(u16) assoc(u32)
      sec_addr: length(u16) + port spec, then align(4)
      n_results(u8) + reserved(3), p_result_t[n_results]
    """
    hdr = parse_ncacn_header(pdu)
    if hdr['ptype'] != DCERPC_PTYPE_BIND_ACK:
        raise NDRError(NDR_ERR.TOKEN, f"expected bind_ack, got ptype=0x{hdr['ptype']:02x}")

    p = NDRPull(pdu, DCERPC_HEADER_LEN)
    max_xmit = p.u16()
    max_recv = p.u16()
    assoc = p.u32()
    sec_addr = p.raw(p.u16())
    p.align(4)

    n_results = p.u8()
    p.skip(3)
    results = []
    for _ in range(n_results):
        result = p.u16()
        reason = p.u16()
        results.append((result, reason, p.raw(20)))

    LOG.debug("[DCE] bind_ack: max_xmit=%d max_recv=%d assoc=0x%08x results=%d",
              max_xmit, max_recv, assoc, len(results))
    return BindAck(max_xmit, max_recv, assoc, sec_addr, results)


def bind_nak_reason(pdu: bytes) -> int:
    return NDRPull(pdu, DCERPC_HEADER_LEN).u16()


def fault_status(pdu: bytes) -> int:
    """rpcconn_fault_hdr_t: status follows alloc_hint/p_cont_id/cancel_count."""
    return NDRPull(pdu).u32_at(RESPONSE_HEADER_LEN)


def response_status(pdu: bytes) -> int:
    """
    The WERROR return value is the last u32 of the response stub. With
    auth_len set the stub is followed by auth_pad_length bytes of padding,
    the sec_trailer and the auth value.
    """
    hdr = parse_ncacn_header(pdu)
    end = hdr['frag_len']
    if hdr['auth_len']:
        trailer = end - hdr['auth_len'] - SEC_TRAILER_LEN
        p = NDRPull(pdu, trailer + AUTH_PAD_LEN_OFFSET)
        end = trailer - p.u8()
    return NDRPull(pdu).u32_at(min(end, len(pdu)) - 4)

"""
Drive the srvsvc share enumeration over an impacket ncacn_np transport.

The transport owns SMB connection, authentication and pipe I/O. This module
only pushes the two PDUs through it and checks the envelopes that come back.
"""
import logging

from impacket.dcerpc.v5 import transport
from impacket.dcerpc.v5.rpcrt import DCERPCException
from impacket.dcerpc.v5.srvs import DCERPCSessionError

from netshare.constants import (
    DCERPC_PTYPE_BIND_NAK,
    DCERPC_PTYPE_FAULT,
    DCERPC_PTYPE_RESPONSE,
    PFC_LAST,
    SRVSVC_PIPE,
)
from netshare.pdu import (
    bind_nak_reason,
    build_bind_pdu,
    build_netshareenumall_request,
    fault_status,
    parse_bind_ack,
    parse_ncacn_header,
    response_status,
)
from netshare.shares import parse_share_enum_all_level1
from netshare.status import BIND_RESULT, WERR_MORE_DATA, WERR_OK

LOG = logging.getLogger(__name__)


class BindRejectedError(Exception):
    def __init__(self, result: int, reason: int):
        super().__init__(f"srvsvc bind rejected: result={result} reason={reason}")
        self.result = result
        self.reason = reason


def connect_srvsvc(host, username="", password="", domain="", lmhash="", nthash="",
                   port=445, remote_name=None):
    """
    Open \\pipe\\srvsvc on host and return the connected transport.
    """
    sb = fr"ncacn_np:{host}[{SRVSVC_PIPE}]"
    rpctransport = transport.DCERPCTransportFactory(sb)
    rpctransport.set_dport(port)
    if remote_name:
        rpctransport.setRemoteName(remote_name)
    if hasattr(rpctransport, "set_credentials"):
        rpctransport.set_credentials(username, password, domain, lmhash, nthash)
    rpctransport.connect()
    LOG.debug("[SRVSVC] pipe open on %s:%d", host, port)
    return rpctransport


def _bind(rpctransport):
    pdu = build_bind_pdu()
    LOG.debug("[DCE] -> BIND (%d bytes)", len(pdu))
    rpctransport.send(pdu)
    resp = rpctransport.recv()
    if parse_ncacn_header(resp)['ptype'] == DCERPC_PTYPE_BIND_NAK:
        # rpcconn_bind_nak_hdr_t: provider_reject_reason(u16)
        raise BindRejectedError(BIND_RESULT.PROVIDER_REJECTION, bind_nak_reason(resp))
    ack = parse_bind_ack(resp)
    if not ack.results:
        raise BindRejectedError(BIND_RESULT.PROVIDER_REJECTION, 0)
    result, reason, _ = ack.results[0]
    if result != BIND_RESULT.ACCEPTANCE:
        raise BindRejectedError(result, reason)
    return ack


def list_shares(rpctransport, server_name=None, include_special=False):
    """
    Bind to srvsvc, call NetrShareEnum at level 1 and decode the SHARE_INFO_1
    list. Other levels are only available through
    build_netshareenumall_request.

    server_name defaults to the UNC form of the transport's remote name.
    """
    if server_name is None:
        server_name = "\\\\" + rpctransport.getRemoteName()

    _bind(rpctransport)

    pdu = build_netshareenumall_request(server_name, level=1)
    LOG.debug("[DCE] -> REQUEST opnum=15 server=%r level=1 (%d bytes)", server_name, len(pdu))
    rpctransport.send(pdu)
    resp = rpctransport.recv()

    hdr = parse_ncacn_header(resp)
    LOG.debug("[DCE] <- ptype=0x%02x frag_len=%d (%d bytes)", hdr['ptype'], hdr['frag_len'], len(resp))
    if hdr['ptype'] == DCERPC_PTYPE_FAULT:
        raise DCERPCException(error_code=fault_status(resp))
    if hdr['ptype'] != DCERPC_PTYPE_RESPONSE:
        raise DCERPCException(f"unexpected ptype 0x{hdr['ptype']:02x} in reply to NetrShareEnum")
    if not hdr['flags'] & PFC_LAST:
        LOG.warning("[SRVSVC] response is fragmented, share list may be incomplete")
    else:
        status = response_status(resp)
        if status not in (WERR_OK, WERR_MORE_DATA):
            raise DCERPCSessionError(error_code=status)

    return parse_share_enum_all_level1(resp, include_special)

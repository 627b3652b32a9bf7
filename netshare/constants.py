# DCE/RPC connection-oriented constants for the srvsvc share enumeration
from impacket.uuid import uuidtup_to_bin

# Abstract / transfer syntaxes (GUID + version)
SRVSVC_TUP = ('4b324fc8-1670-01d3-1278-5a47bf6ee188', "3.0")
NDR32_TUP = ('8a885d04-1ceb-11c9-9fe8-08002b104860', "2.0")

# 20-byte wire form: GUID (bytes_le) + major + minor
SRVSVC_BIN = uuidtup_to_bin(SRVSVC_TUP)
NDR32_BIN = uuidtup_to_bin(NDR32_TUP)

SRVSVC_PIPE = r'\pipe\srvsvc'

RPC_VERS = 5
RPC_VERS_MINOR = 0

DCERPC_PTYPE_REQUEST = 0x00
DCERPC_PTYPE_RESPONSE = 0x02
DCERPC_PTYPE_FAULT = 0x03
DCERPC_PTYPE_BIND = 0x0b
DCERPC_PTYPE_BIND_ACK = 0x0c
DCERPC_PTYPE_BIND_NAK = 0x0d

PFC_FIRST = 0x01
PFC_LAST = 0x02

# LE integers, ASCII chars, IEEE floats
DREP_LE = b'\x10\x00\x00\x00'

DCERPC_HEADER_LEN = 16
FRAG_LEN_OFFSET = 8
ALLOC_HINT_OFFSET = 16
# 16 (common) + 4 alloc_hint + 2 ctx_id + 2 opnum / cancel_count+reserved
REQUEST_HEADER_LEN = 24
RESPONSE_HEADER_LEN = 24

# sec_trailer: auth_type(u8) auth_level(u8) auth_pad_length(u8) reserved(u8) context_id(u32)
SEC_TRAILER_LEN = 8
AUTH_PAD_LEN_OFFSET = 2

BIND_CALL_ID = 1
REQUEST_CALL_ID = 0
MAX_FRAG = 0xFFFF

# ---- OPNUM ----
SRVSVC_OPNUM_NetrShareEnum = 0x0F

# NetShareEnumAll level 1 response layout (offsets into the whole PDU)
SHARE_COUNT_OFFSET = 44
SHARE_ARRAY_OFFSET = 48
SHARE_INFO_1_SIZE = 12
SHARE_INFO_1_TYPE_OFFSET = 4

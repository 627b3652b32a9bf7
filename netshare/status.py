# ---- share types / bind results / WERROR ----
from enum import IntEnum

STYPE_DISKTREE  = 0x00000000
STYPE_PRINTQ    = 0x00000001
STYPE_DEVICE    = 0x00000002
STYPE_IPC       = 0x00000003
STYPE_TEMPORARY = 0x40000000
STYPE_SPECIAL   = 0x80000000

# low 24 bits carry the base type, the rest are modifiers
STYPE_MASK      = 0x00FFFFFF

# marks a type field that could not be read
STYPE_UNKNOWN   = 0xFFFFFFFF

STYPE_NAMES = {
    STYPE_DISKTREE: "DISKTREE",
    STYPE_PRINTQ:   "PRINTQ",
    STYPE_DEVICE:   "DEVICE",
    STYPE_IPC:      "IPC",
}


def share_type_name(stype: int) -> str:
    if stype == STYPE_UNKNOWN:
        return "UNKNOWN"
    name = STYPE_NAMES.get(stype & STYPE_MASK, hex(stype & STYPE_MASK))
    if stype & STYPE_SPECIAL:
        name += "|SPECIAL"
    if stype & STYPE_TEMPORARY:
        name += "|TEMPORARY"
    return name


def is_disk_share(stype: int, include_special: bool = False) -> bool:
    if stype == STYPE_DISKTREE:
        return True
    return include_special and (stype & STYPE_MASK) == STYPE_DISKTREE


# p_cont_def_result_t
class BIND_RESULT(IntEnum):
    ACCEPTANCE = 0
    USER_REJECTION = 1
    PROVIDER_REJECTION = 2
    NEGOTIATE_ACK = 3


# WERROR values a NetShareEnumAll response may carry
WERR_OK                 = 0x00000000
WERR_ACCESS_DENIED      = 0x00000005
WERR_MORE_DATA          = 0x000000EA

"""Stable card identities derived from flashcard front-text."""

from eduquest.domain.constants import CARD_ID_PREFIX

_UINT32 = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _to_int32(value: int) -> int:
    value &= _UINT32
    return value - (1 << 32) if value & _INT32_SIGN else value


def text_hash(text: str) -> int:
    """
    Rolling ``h * 31 + c`` hash with 32-bit signed wraparound at every step.

    Iterates UTF-16 code units rather than code points, so characters outside
    the BMP contribute their surrogate pair exactly as a browser client would.
    """
    data = text.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        h = _to_int32((h << 5) - h + code)
    return h


def card_id(front: str) -> str:
    """Return the storage key for a flashcard, e.g. ``card_1532024819``."""
    return f"{CARD_ID_PREFIX}{text_hash(front)}"

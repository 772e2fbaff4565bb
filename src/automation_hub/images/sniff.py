"""
automation_hub.images.sniff

Magic-byte content type detection for image uploads.

Implements the image rows of the WHATWG MIME sniffing table, the same table
browsers and Go's `http.DetectContentType` use. Only the first 512 bytes are
considered.
"""

from __future__ import annotations

SNIFF_LEN = 512

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# (mask, pattern, content type); a byte matches when (data & mask) == pattern.
_SIGNATURES: tuple[tuple[bytes, bytes, str], ...] = (
    (b"\xff\xff\xff\xff", b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\xff\xff\xff\xff", b"\x00\x00\x02\x00", "image/x-icon"),
    (b"\xff\xff", b"BM", "image/bmp"),
    (b"\xff\xff\xff\xff\xff\xff", b"GIF87a", "image/gif"),
    (b"\xff\xff\xff\xff\xff\xff", b"GIF89a", "image/gif"),
    (
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff\xff\xff",
        b"RIFF\x00\x00\x00\x00WEBPVP",
        "image/webp",
    ),
    (b"\xff\xff\xff\xff\xff\xff\xff\xff", b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xff\xff", b"\xff\xd8\xff", "image/jpeg"),
)

# Extensions each sniffed subtype may legitimately carry.
SUBTYPE_EXTENSIONS: dict[str, frozenset[str]] = {
    "jpeg": frozenset({".jpg", ".jpeg", ".jpe"}),
    "x-icon": frozenset({".ico", ".cur"}),
}


def _matches(data: bytes, mask: bytes, pattern: bytes) -> bool:
    if len(data) < len(pattern):
        return False
    return all((d & m) == p for d, m, p in zip(data, mask, pattern))


def detect_content_type(head: bytes) -> str:
    data = head[:SNIFF_LEN]
    for mask, pattern, content_type in _SIGNATURES:
        if _matches(data, mask, pattern):
            return content_type
    return DEFAULT_CONTENT_TYPE


def extensions_for(content_type: str) -> frozenset[str]:
    """
    Map an `image/*` content type to the file extensions it may be stored under.
    """

    subtype = content_type.partition("/")[2]
    return SUBTYPE_EXTENSIONS.get(subtype, frozenset({f".{subtype}"}))

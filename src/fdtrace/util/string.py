"""
String manipulation utilities for fdtrace.
"""

import codecs


def c_str_to_bytes(s: str) -> bytes:
    """
    Convert a C-style string with escapes like \\n, \\t, \\xHH, \\0NNN to bytes.

    strace prints path arguments this way, so every quoted path goes through
    here before it is turned into a file system path. Raw bytes that were
    read as lone surrogates (errors="surrogateescape") come back unchanged,
    and so does already-decoded UTF-8 text.

    Args:
        s: A string containing C-style escapes, without surrounding quotes

    Returns:
        bytes: The decoded bytes with the escapes interpreted

    Raises:
        ValueError: If an escape sequence is incomplete or invalid

    Examples:
        >>> c_str_to_bytes('\\x2f\\x74\\x6d\\x70')
        b'/tmp'
        >>> c_str_to_bytes('caf\\udce9')
        b'caf\\xe9'
    """
    raw = s.encode("utf-8", "surrogateescape")
    decoded, _ = codecs.escape_decode(raw)
    return decoded

"""Repair of mis-encoded free text returned by the transit API."""

from __future__ import annotations


def fix_accents(text: object) -> str:
    """Re-decode UTF-8 text that the API delivered as Latin-1 code points.

    "DeÃ¡k" becomes "Deák". Text that is not such mojibake (plain ASCII,
    already correct accents, characters outside Latin-1) is returned
    unchanged. Numbers and other scalars are stringified.
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)
    if not text:
        return ""
    try:
        return text.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return text


__all__ = ["fix_accents"]

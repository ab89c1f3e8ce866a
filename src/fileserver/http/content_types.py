"""
=============================================================================
CONTENT CLASSIFIER
=============================================================================

Infers the Content-Type of a served file from its bytes, not its name.

=============================================================================
CONTENT SNIFFING VS EXTENSION LOOKUP
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    TWO WAYS TO GUESS A MIME TYPE                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   EXTENSION LOOKUP                 CONTENT SNIFFING                 │
    │   ────────────────                 ────────────────                 │
    │                                                                      │
    │   photo.png → image/png            89 50 4E 47 ... → image/png      │
    │   Trusts the filename              Trusts the leading bytes         │
    │   Wrong for renamed files          Right for renamed files          │
    │   Works for text formats           Text has no magic number         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

This server sniffs. Binary formats (images, archives, audio, video, fonts,
documents) start with a fixed signature ("magic number"), and the
`filetype` library carries a table of them:

    PNG     89 50 4E 47              → image/png
    JPEG    FF D8 FF                 → image/jpeg
    GIF     47 49 46                 → image/gif
    PDF     25 50 44 46              → application/pdf
    ZIP     50 4B 03 04              → application/zip

Anything without a known signature (plain text, HTML, source code, random
bytes) falls back to text/plain.

=============================================================================
"""

import logging

import filetype


logger = logging.getLogger(__name__)


# Fallback when no signature matches
DEFAULT_CONTENT_TYPE = "text/plain"

# Generated pages (directory listings, 404)
HTML_CONTENT_TYPE = "text/html"


def sniff_content_type(data: bytes) -> str:
    """
    Return the MIME type of `data` based on its magic number.

    Never raises: an unknown or empty payload is classified as text/plain.

    Examples:
        >>> sniff_content_type(b"\\x89PNG")
        'image/png'

        >>> sniff_content_type(b"hello world")
        'text/plain'
    """
    if not data:
        return DEFAULT_CONTENT_TYPE

    mime = filetype.guess_mime(bytes(data))
    if mime is None:
        logger.debug(f"No signature match for {len(data)} bytes, using {DEFAULT_CONTENT_TYPE}")
        return DEFAULT_CONTENT_TYPE
    return mime

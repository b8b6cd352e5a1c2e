"""hieruri.codec
Percent-encoding of single URI components (RFC 3986 section 2.1)
"""

import logging
import re

# urllib.parse already does exactly the right thing for both directions:
# its always-safe set is the RFC 3986 unreserved set, and it emits uppercase hex.
from urllib.parse import quote, unquote_to_bytes

_logger: logging.Logger = logging.getLogger(__name__)

# pct-encoded = "%" HEXDIG HEXDIG
_PCT_ENCODED_PAT: re.Pattern[str] = re.compile(r"%[0-9A-Fa-f]{2}")


def encode_component(data: str | None) -> str | None:
    """Percent-encodes every character of data outside the unreserved set (ALPHA / DIGIT / "-" / "." / "_" / "~"),
    one %XX per UTF-8 byte.
    e.g. encode_component("a b/ü") == "a%20b%2F%C3%BC"
    """
    if data is None:
        return None
    # A lone surrogate has no UTF-8 form and is encoded as "?".
    return quote(data.encode("utf-8", errors="replace"), safe="")


def decode(data: str | None) -> str | None:
    """Reverses percent-encoding.
    Malformed escapes are copied through, and byte sequences that aren't UTF-8 become U+FFFD.
    """
    if data is None:
        return None
    if data.count("%") != len(_PCT_ENCODED_PAT.findall(data)):
        _logger.debug("Copying malformed percent-escapes in %r through undecoded", data)
    return unquote_to_bytes(data).decode("utf-8", errors="replace")

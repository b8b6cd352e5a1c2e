__version__ = "0.1"

import logging

from .codec import decode, encode_component
from .parse import MAX_PORT, UNDEFINED_PORT, Authority, NullArgumentError, ParsedComponents, collapse_dot_segments, is_valid_scheme, parse_components, parse_port, split_authority
from .uri import URI, build_uri, parse_uri

logging.getLogger(__name__).addHandler(logging.NullHandler())

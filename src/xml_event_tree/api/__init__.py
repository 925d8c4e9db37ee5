"""Public parsing API and the readers behind it."""

from .parser import (
    XMLTreeParser,
    from_file,
    from_string,
    from_url,
    parse,
    parse_from_file,
    parse_from_url,
)
from .sources import fetch_url, read_file

__all__ = [
    "XMLTreeParser",
    "from_file",
    "from_string",
    "from_url",
    "parse",
    "parse_from_file",
    "parse_from_url",
    "fetch_url",
    "read_file",
]

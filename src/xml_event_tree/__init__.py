"""XML Event Tree.

Turns an XML document into a tree of plain key/value nodes ready for JSON
serialization. The document is scanned into lexical events (open tag, text,
CDATA, close tag) and a small state machine builds the tree from them.
Repeated sibling tags become lists; everything else stays a single node.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_from_file(), parse_from_url()
- Level 2: Configured parser - XMLTreeParser class, with background futures
- Level 3: Event-level building - scan() and TreeBuilder
"""

__version__ = "0.1.0"
__author__ = "XML Event Tree Team"

# Level 1: Simple functions
# Level 2: Configured parser
from .api import (
    XMLTreeParser,
    from_file,
    from_string,
    from_url,
    parse,
    parse_from_file,
    parse_from_url,
)

# Level 3: Event-level building
from .lexical import scan
from .shared import (
    ErrorPolicy,
    FileReadError,
    LexicalError,
    ParserConfig,
    TransportError,
    XMLTreeError,
)
from .tree import (
    BuildResult,
    TreeBuilder,
    attribute,
    child,
    children,
    get_element_attr,
    get_element_text,
    text,
    to_json,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_from_file",
    "parse_from_url",
    "from_string",
    "from_file",
    "from_url",

    # Node accessors
    "attribute",
    "text",
    "child",
    "children",
    "get_element_attr",
    "get_element_text",
    "to_json",

    # Level 2: Configured parser
    "XMLTreeParser",
    "ParserConfig",
    "ErrorPolicy",

    # Level 3: Event-level building
    "scan",
    "TreeBuilder",
    "BuildResult",

    # Errors
    "XMLTreeError",
    "TransportError",
    "FileReadError",
    "LexicalError",
]

"""
=======
Backend
=======

The parser and resolver collaborators used by configuration sources: they
read raw origins into :mod:`configuration trees <treeconf.tree>` and resolve
substitutions in them.

"""

from treeconf.backend.loaders import (
    DEFAULT_OPTIONS,
    ParseOptions,
    clear_property,
    default_application,
    default_reference,
    find_resources,
    get_properties,
    load,
    parse_file,
    parse_resources,
    parse_resources_any_syntax,
    parse_string,
    parse_url,
    set_property,
    system_properties,
)
from treeconf.backend.parser import parse_text
from treeconf.backend.resolver import resolve

__all__ = [
    "__title__",
    "__summary__",
    "__uri__",
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    "__copyright__",
]

__title__ = "treeconf"
__summary__ = (
    "treeconf loads layered configuration trees from files, strings, URLs and "
    "resources and reads them into typed values with accumulated failures."
)
__uri__ = "https://github.com/treeconf/treeconf"

__version__ = "0.3.0"

__author__ = "The treeconf developers"
__email__ = "treeconf.dev@gmail.com"

__license__ = "BSD-3-Clause"
__copyright__ = f"Copyright 2026 {__author__}"

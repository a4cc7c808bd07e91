"""Overview documentation pages stored in the IR under ``x-docs``.

See :mod:`specir.docs.overview` for the individual pages.
"""

from specir.docs.overview import build_overview_docs

__all__ = ["build_overview_docs"]

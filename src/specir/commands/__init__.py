"""Built-in CLI sub-commands for specir.

* :mod:`~specir.commands.build` -- compile a document and write the IR.
* :mod:`~specir.commands.inspect` -- tabular views of the compiled IR:
  operations, schemas, and detected pagination.

Each module exports plain callback functions that :mod:`specir.app`
registers directly on the root application.
"""

"""The OpenAPI compiler: normalization, expansion, naming and operation tuning.

The pipeline entry point is :func:`specir.compiler.ir.build_ir`. Stages live
in their own modules and can be used on their own:

* :mod:`~specir.compiler.normalizer` -- canonical schema forms.
* :mod:`~specir.compiler.variants` -- union member names.
* :mod:`~specir.compiler.expander` -- hoisting of inline composites.
* :mod:`~specir.compiler.operations` -- operation IDs, tags, bodies and
  responses.
"""

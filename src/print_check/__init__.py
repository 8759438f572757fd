"""print-check: print-readiness validation for PDF files.

The package is organised in layers:

- ``core``: enumerations, error types and unit helpers
- ``document``: read-only PDF document model and content-stream replay
- ``validation``: the checks, options resolution and report models
- ``interfaces.cli``: the ``print-check`` command
"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"

"""gitslice.

Packages the changes of a git commit, or the divergence between two
branches, into a single XML document for code analysis workflows.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]

"""antlrgen - ANTLR grammar generation step for Python builds.

Finds ANTLR 3 grammar files under a project's source tree, compiles each
containing directory with the ANTLR tool and mirrors the generated sources
into a parallel output tree.
"""

__version__ = "0.1.0"

"""Collaborator protocols.

The PyMuPDF implementations live in :mod:`.fitz_renderer` and
:mod:`.fitz_mutator`.
"""

from .interfaces import DocumentMutator, Renderer

__all__ = ["DocumentMutator", "Renderer"]

"""
Docflow Kernel - sequential multi-approver workflow engine.

A document-approval core with:
- Ordered approval steps initialized from the document type
- Strict sequential gating (one actionable step at a time)
- Compare-and-swap step decisions safe under concurrent callers
- Document status derived purely from the step set
- Best-effort activity trail
"""

__version__ = "0.1.0"

"""Narrative annotation comparison toolkit.

Compares human and model narrative codes of interview transcripts with:
- Normalization of coded transcript spreadsheets (Self/Us/Now, Challenge/Choice/Outcome)
- Run-length segmentation into equally-coded blocks
- Aligned segmentation of two annotations of the same transcript
- Word-weighted timeline dashboards and SVG export
"""

__version__ = "0.1.0"

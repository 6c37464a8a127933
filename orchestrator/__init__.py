"""
Orchestration package for the export run.

The traversal engine walks the note link graph and fills the staging tree;
the export report summarizes what one run collected, missed and failed on.
"""

from .traversal_engine import TraversalEngine
from .export_report import ExportReport

__all__ = [
    'TraversalEngine',
    'ExportReport'
]

"""
Exam Integrity

Ingestion, academic-integrity screening and examiner routing for
uploaded exam submissions.
"""

__version__ = "0.1.0"

"""
ApplyPDF - turns submitted job applications into PDF documents
"""
__version__ = "1.0.0"

"""
Doc Enhancer - AI-assisted, context-aware document enhancement.
"""

__version__ = "1.0.0"

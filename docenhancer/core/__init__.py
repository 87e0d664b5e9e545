"""
Core components: LLM providers, storage, content conversion, selection
resolution, the wiki client and PDF image extraction.
"""

"""
AI Brief Backend

A FastAPI backend that aggregates AI news feeds and streams an
LLM-written daily brief, parsed into structured sections.
"""

__version__ = "1.0.0"

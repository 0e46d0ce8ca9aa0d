"""
Utility modules for ReviewSense.

Cross-cutting concerns:
- JSON extraction: Find the first JSON object in LLM output
- Storage: File I/O helpers for data persistence
"""

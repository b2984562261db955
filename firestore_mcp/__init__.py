"""
Read-only Firestore MCP server package.

This package exposes LLM-friendly query tools backed by a Firestore database.
See DESIGN.md for full details.
"""

__all__ = ["config"]

"""
Zora Coins MCP server package.

This package exposes LLM-friendly tools backed by the Zora coin-platform API
and the Base chain RPC. Query tools work without credentials; write tools are
enabled only when a signing key is configured. See DESIGN.md for details.
"""

__version__ = "0.1.0"

__all__ = ["config", "__version__"]

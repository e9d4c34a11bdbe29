"""toon-mcp: TOON encoding and decoding over MCP and HTTP.

TOON is a compact, indentation-based alternative to JSON that spends fewer
LLM tokens on the same data.
"""

__version__ = "0.1.0"

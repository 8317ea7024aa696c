"""
codeindex-mcp - incremental code search for AI coding assistants.

An MCP server that keeps a keyword index of a project's source code so an
assistant can find the relevant functions and classes without rereading the
whole tree on every question.

Stack:
- Python + FastMCP (official SDK)
- JSON index document (inverted keyword index)
- YAML language profiles (definition signature patterns)
- stdio transport
"""

__version__ = "0.1.0"

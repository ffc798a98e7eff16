"""
MCP Adapter

Bridges a stdio JSON-RPC subprocess to HTTP request/response and SSE clients.
"""

__version__ = "1.0.0"

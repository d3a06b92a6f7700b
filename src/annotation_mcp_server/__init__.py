"""
annotation-mcp-server

Stateful annotation of pre-chunked documents, exposed as MCP-style tools
over HTTP.
"""

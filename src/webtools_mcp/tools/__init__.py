"""Web Tools MCP tool modules.

Each module exposes a ``register_*_tools(mcp, get_services)`` function that
attaches ``@web_tool`` handlers to the FastMCP server instance.
"""

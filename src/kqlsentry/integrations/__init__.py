"""Agent framework integrations.

Available integrations:
- kqlsentry.integrations.mcp - MCP (Model Context Protocol) server
"""

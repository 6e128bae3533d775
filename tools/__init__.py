"""MCP tool registration for the TON mint server"""

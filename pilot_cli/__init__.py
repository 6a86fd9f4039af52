"""
Pilot CLI - Command-line front end for the Pilot assistant.

Provides subcommands for:
- pilot ask                 - One-shot question (optionally with tools)
- pilot session             - Start, continue, list and delete sessions
- pilot summarize-clipboard - Summarize the clipboard text
- pilot summarize-file      - Summarize a text file
- pilot transform           - Rewrite text following an instruction
- pilot notify              - Post a desktop notification
- pilot history             - Show recent tool executions
- pilot config              - Show or change configuration
- pilot doctor              - Check the claude CLI and local capabilities
- pilot mcp                 - Run the MCP tool server on stdio
"""

__version__ = "0.1.0"

"""Claude CLI orchestration -- executable lookup, argv building, output parsing.

These modules drive the external ``claude`` binary as a subprocess. The
ClaudeCLI service in claude_cli.py ties them together; the rest are small
stateless helpers it calls.
"""

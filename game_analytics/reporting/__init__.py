"""
game_analytics.reporting — terminal formatting for CLI commands.

Modules:
  formatters — ASCII table formatters for Typer CLI output.
"""

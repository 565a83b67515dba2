"""
stock_check.reporting — Run export and terminal formatting.

Modules:
  export     — JSON payload / CSV row export and payload loading.
  formatters — ASCII terminal table formatters for Typer CLI commands.
"""

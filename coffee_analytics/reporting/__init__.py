"""
coffee_analytics.reporting — Input file reading and terminal formatting.

This package loads the JSON batches the CLI is pointed at and renders
analysis models for display. It does NOT compute anything: every number
it prints comes from a model built elsewhere.

Modules:
  reader     — JSON input loaders (return None instead of raising).
  formatters — ASCII formatters returning strings for ``typer.echo()``.
"""

"""
Reporting layer — plain-text formatters for the CLI.

Modules
-------
formatters : ASCII tables and banners for seasons, recommendations,
             price bands and cache verdicts.
"""

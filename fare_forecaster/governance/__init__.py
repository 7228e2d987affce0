"""
Data fitness guardrails for the Fare Forecaster.

This sub-package provides:

  governance/freshness.py — max-age checks for cached aggregates and
                            calendar gap detection over date ranges.

Purpose
-------
The refresh path (owned by the presentation / ingestion layer) needs two
answers before it re-fetches anything:

  - Is the cached aggregate still young enough to use?
  - Which specific days are missing from a cached date range?

These functions only classify; they never schedule a refetch themselves.
"""

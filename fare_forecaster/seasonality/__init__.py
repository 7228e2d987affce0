"""
Seasonality analysis: turns raw fares into low / normal / high seasons.

Modules
-------
aggregator : aggregate_periods() — monthly average price + percentile rank.
scorer     : SeasonWeights + compute_composite_score() + score_periods().
classifier : TertilePolicy + classify_scores() — tertile-by-index split.
summary    : summarize_seasons() — per-season periods, price range, best deal.

All functions are pure: no I/O, no shared state.
"""

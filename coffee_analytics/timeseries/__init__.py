"""
Time-series layer: the caller-owned observation store and the season calendar.

Modules
-------
seasons      : SeasonalClassifier + fixed month table, weights and yield targets.
series_store : SeriesStore — append-only observations, trend, one-step
               estimate, lazy season-aware daily forecast, per-season stats.
"""

"""
Yield forecasting on top of the series store.

Modules
-------
yield_forecaster : YieldForecaster — restartable 90-day growth forecast and
                   per-season yield projection against fixed targets.
"""

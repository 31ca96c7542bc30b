"""
Quality-grade outlook for a plot.

Modules
-------
predictor : predict_quality_distribution() + predict_seasonal_yield() and
            the fixed condition factors behind them — pure functions.
"""

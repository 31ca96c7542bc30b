"""
Coffee farm analytics core.

Turns harvest quantities, environmental readings and fertilisation events
into a seasonal regime classification, a growth/yield forecast, a bounded
risk score, prioritised recommendations and a quality-grade outlook.

Entry point for external callers::

    from coffee_analytics.analytics.orchestrator import AnalyticsOrchestrator

    orchestrator = AnalyticsOrchestrator()
    orchestrator.initialize(harvest_rows, weather_rows)
    report = orchestrator.comprehensive_analysis(conditions)
"""

__version__ = "0.1.0"

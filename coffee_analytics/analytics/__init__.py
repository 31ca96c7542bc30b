"""
Analytics orchestration: batch validation, yield impacts, comprehensive report.

Modules
-------
validation   : harvest/weather batch filtering, condition normalisation,
               plot status parsing.
impacts      : temperature, rainfall, fertiliser and pest yield multipliers.
orchestrator : AnalyticsOrchestrator — owns the store, engine and history
               for one session and builds the comprehensive report.
"""

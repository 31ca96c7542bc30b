"""
Recommendation list handling shared by the engine and the orchestrator.

Modules
-------
ranker : prioritize_recommendations() — merge, de-duplicate, severity-sort
         and truncate recommendation lists. Pure functions, no I/O.
"""

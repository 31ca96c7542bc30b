"""
Decision support: risk scoring, rule-based recommendations, seasonal advice.

Modules
-------
engine : DecisionSupportEngine — parameter validation, rule table, risk
         score, seasonal care tips and the seasonal analysis report.
"""

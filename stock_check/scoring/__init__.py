"""
Composite scoring: converts a normalized 43-factor vector into a projected
next-day percentage growth.

Modules
-------
scorer : score_growth_pct() + factor_contributions() + project_price()
         — pure functions, no I/O.
"""

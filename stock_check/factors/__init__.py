"""Factor engineering package for the Stock Check composite model.

Modules
-------
registry   — Factor dataclass + FACTORS (the locked 43-factor table)
normalize  — NormalizationRule table + normalize_inputs() (raw → [0, 1])
"""

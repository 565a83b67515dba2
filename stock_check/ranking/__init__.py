"""
Ranking engine: scored universe → Top 10 + appended ticker + decision gate.

Modules
-------
ranker : score_entity() + rank_universe() + trade_header_for()
         + sector_concentration() — pure functions, no I/O.
"""

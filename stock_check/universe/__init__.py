"""
Universe sources.

Modules
-------
prng       — Mulberry32 step function + RandomStream (seeded draws)
synthetic  — generate_universe(seed, size) for MOCK mode
live       — fetch_live_universe(live_config) for LIVE mode (Alpha Vantage)
"""

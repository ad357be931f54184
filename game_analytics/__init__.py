"""
game_analytics — sales and rating analytics over a video game catalogue.

Layers (leaf first):
  models / taxonomy   — pydantic record and result types, closed enums.
  analysis            — map/group/reduce engine, task table, filter engine.
  cache / db          — TTL result cache (in-memory or SQLite).
  pipeline            — Filter → Cache → Aggregation query pipeline.
  insights            — market opportunity, competition and pricing metrics.
  recommendations     — preference-driven ranking and genre trend forecasts.
  ingestion           — games CSV reader.
  reporting           — ASCII formatters for the CLI.
"""

__version__ = "0.1.0"

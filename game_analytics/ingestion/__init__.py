"""
Ingestion layer — reads the games CSV into GameRecord objects.

Submodules:
  games_csv — lenient CSV reader with skip counting
"""

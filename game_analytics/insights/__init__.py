"""
Market insight engine: derived metrics computed directly over the records.

Modules
-------
market : pure scoring functions (potential, HHI, price band) and
         MarketInsightEngine (opportunities, competition, price strategy).
"""

"""
Recommendation engine: turns user actions into preference weights and ranks
titles against them, with popularity fallbacks and genre trend forecasts.

Modules
-------
scorer : content_score() + similarity() + popularity_score() + reason
         builders — pure functions, no state or I/O.
trend  : linear_regression() + regression_confidence().
engine : RecommendationEngine — per-user profiles and ranking operations.
"""

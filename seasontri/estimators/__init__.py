"""
Reserve estimators. ``BaseChainLadder`` squares cumulative triangles using
age-to-age factors; ``SeasonalChainLadder`` applies it to
seasonality-adjusted quarterly data.
"""

"""
Match resolution and forecast settlement.
Classifies forecasts by sport, finds the finished fixture across nearby dates,
and settles the forecast (and any value bet) against the final score.
"""

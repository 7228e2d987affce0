"""Fare Forecaster — flight fare seasonality analysis and travel-period recommendations."""

__version__ = "0.3.0"

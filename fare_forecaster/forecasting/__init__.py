"""
Price-band forecasting: stitches observed daily fares with predictor output.

Modules
-------
predictor : Predictor protocol, PredictorUnavailableError, confidence tiers
            and SeasonalNaivePredictor (numpy weekday baseline).
band      : PriceBandForecaster — actual prefix + forecast segment, degrading
            to actual-only when the predictor fails.
trend     : compute_price_trend() — increasing / decreasing / stable.

The production regression model is a black box behind ``Predictor``;
``fare_forecaster.ml.lgbm_model.LightGBMFarePredictor`` is one implementation.
"""

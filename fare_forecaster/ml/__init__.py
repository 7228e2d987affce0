"""
ML layer — LightGBM regression behind the ``Predictor`` interface.

Modules
-------
lgbm_model : LightGBMFarePredictor (fit, predict, save, load) over
             date-derived features with tiered confidence bands.
"""

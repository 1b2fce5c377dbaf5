"""Heart-rate smoothing and classification.

This package contains the estimator, guard and classifier together with their
domain models, isolated from ingestion and UI concerns for easy testing.
"""

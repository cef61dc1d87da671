"""Infrastructure layer — process-level concerns for the composer.

Modules:
    metrics     Prometheus counters and histograms for analysis and generation.
    settings    Environment / .env driven runtime settings.
"""

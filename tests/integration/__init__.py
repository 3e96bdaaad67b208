"""
Integration tests.

These run against a live Prometheus and Pushgateway and are skipped unless
PROMETHEUS_INTEGRATION_URL / PUSHGATEWAY_INTEGRATION_URL are set.
"""

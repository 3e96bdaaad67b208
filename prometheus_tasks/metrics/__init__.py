"""
Metrics Module

Value objects (models) and the pure services that decode query responses,
apply fetch modes and render push bodies.
"""

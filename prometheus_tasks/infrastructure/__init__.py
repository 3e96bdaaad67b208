"""
Infrastructure Module

Adapters for the outside world: the HTTP dispatcher and result sinks.
"""

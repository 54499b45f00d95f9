"""
Nature Remo Prometheus Exporter
Polls the Nature Remo Cloud API and exposes sensor readings as metrics
"""

__version__ = "1.0.0"

"""Core domain: models, ports, encoders and the logging/metrics services."""

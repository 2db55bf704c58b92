"""Encoders for log records and measurement points."""

"""Detect vendored copies of TGM Plugin Activation and check their version."""

__version__ = "0.1.0"

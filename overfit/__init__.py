"""Resampling toolkit for studying overfitting, cross-validation and the bootstrap."""

__version__ = "0.1.0"

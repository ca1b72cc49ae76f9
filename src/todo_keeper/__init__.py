"""Durable storage and coordination core for a personal todo tracker."""

__version__ = "0.1.0"

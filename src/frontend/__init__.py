"""Outer adapters for the quranize engine: a CLI (`python -m frontend`) and a Flask app (`frontend.web`)."""

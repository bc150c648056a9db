"""Manifest decoding, dependency parsing and same-name variant selection."""

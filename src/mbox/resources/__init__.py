"""Packaged resources for mbox."""

"""Typed models for the station dataset."""

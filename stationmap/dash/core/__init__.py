"""Dash application factory and callback registration."""

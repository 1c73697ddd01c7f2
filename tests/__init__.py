"""Test package for the multiplication drill.

Unit tests for the session controller, results formatting and configuration,
plus headless UI tests that use pygame's dummy video driver so no real window
is opened.  Run ``pytest`` from the project root.
"""

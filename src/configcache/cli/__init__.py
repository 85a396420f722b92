"""
Command-line interface for inspecting configuration values.
"""

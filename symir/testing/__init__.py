"""Hypothesis strategies and stateful tests for symir."""

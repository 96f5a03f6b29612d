"""Gradio user interface for Clone Master."""

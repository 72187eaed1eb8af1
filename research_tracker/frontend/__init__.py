"""Streamlit frontend for the research tracker."""

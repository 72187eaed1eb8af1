"""
Research tracker application package.

This package contains a small journal for biomedical research
references: a backend holding, persisting, filtering and exporting
entries, and a Streamlit frontend with the entry form and list.
"""

"""API layer: canonical query/transform surface for the CLI and export.

Key rules:

1. No network access - callers hand in records already loaded
2. All filtering/sorting/paging goes through cutoffs.query.pipeline
3. Return Pydantic models or plain strings only
"""

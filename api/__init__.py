"""HTTP surface for ideaforge (FastAPI)."""

"""HTTP API for the SPSS-to-R converter (FastAPI)."""

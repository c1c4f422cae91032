"""
API Routes Package
==================
Helpers shared by the FastAPI app (api.py) and the command-line entry point.

Modules:
  helpers  - JSON coercion, result serialization
"""

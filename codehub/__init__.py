"""
Desmos Code Hub Backend Package
===============================

Flask-based backend for the Desmos Computational Layer snippet generator.

Structure:
- routes/: API route blueprints
- services/: AI request building, response normalization, form state, snippets
- models.py: ProblemAnalysis and ImageUpload value types
- config.py: Configuration management
"""

from .config import config, Config

__version__ = "1.0.0"

__all__ = ['config', 'Config']

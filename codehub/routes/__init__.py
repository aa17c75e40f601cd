"""
Code Hub API Routes
===================

All API route blueprints for the Code Hub application.

Usage:
    from codehub.routes import register_routes
    register_routes(app)
"""
from .settings_routes import settings_bp
from .ai_routes import ai_bp
from .snippet_routes import snippet_bp


def register_routes(app):
    """Register all route blueprints with the Flask app."""
    app.register_blueprint(settings_bp)
    app.register_blueprint(ai_bp)
    app.register_blueprint(snippet_bp)


__all__ = [
    'register_routes',
    'settings_bp',
    'ai_bp',
    'snippet_bp',
]

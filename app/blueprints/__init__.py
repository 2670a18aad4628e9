"""
Work Package Platform
Blueprint registry.

Blueprints are imported and registered in app.create_app().
"""

"""
api — HTTP surface: profile and task routes, middleware, error rendering.
"""

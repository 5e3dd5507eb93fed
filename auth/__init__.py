"""
auth — User authentication module.

Provides:
  • JWT issuance, verification & refresh (``TokenService``)
  • Password hashing with bcrypt (``PasswordHasher``)
  • Register / Login / Refresh / Logout API routes
  • ``get_current_user`` FastAPI dependency
"""

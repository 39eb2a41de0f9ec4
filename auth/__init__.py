"""
auth — credential and token primitives.

Provides:
  • Password hashing (bcrypt, per-call salt)
  • Signed, expiring identity tokens (HMAC-SHA256)
"""

# accounts/__init__.py
"""
Accounts app - Users, their legal accounts and per-type profiles.

This app provides:
- User: Custom email-login user
- Account: Individual / Company / Trust / Partnership owned by one user
- Profiles: type-specific details, each carrying an encrypted TFN
- Identifier guard: one TFN per open account, system-wide
"""

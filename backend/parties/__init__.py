# parties/__init__.py
"""
Parties app - co-owners of company, partnership and trust accounts, and
the spouse on an individual account.

Each co-owner is invited by email with a single-use token and approves or
rejects their association. The four party types share one state machine,
parameterized by PartyTypeDescriptor (parties.types).
"""

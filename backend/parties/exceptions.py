# parties/exceptions.py
"""
Party and invitation errors.

Each carries a stable ``code`` which the command layer passes through to
CommandResult.fail().
"""


class PartyError(Exception):
    code = "invalid"
    default_message = "Invalid party operation."

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class UnknownPartyType(PartyError):
    code = "unknown_party_type"

    def __init__(self, key):
        super().__init__(f"Unknown party type: {key!r}")


class WrongAccountType(PartyError):
    code = "wrong_account_type"
    default_message = "This account type does not take these parties."


class PartyNotFound(PartyError):
    code = "not_found"
    default_message = "Party not found."


class DuplicatePartyError(PartyError):
    code = "duplicate_party"
    default_message = "This email is already added to this account."


class InvitationExpiredOrInvalid(PartyError):
    code = "invitation_invalid"
    default_message = "Invalid or expired invitation."


class InvalidStateTransition(PartyError):
    code = "invalid_state"
    default_message = "Invalid state transition."


class IdentityMismatch(PartyError):
    code = "identity_mismatch"
    default_message = "Email does not match authenticated user."


class PartyLimitReached(PartyError):
    code = "party_limit"
    default_message = "This account already has the maximum number of these parties."

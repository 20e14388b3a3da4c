"""Errors raised by the verification engine.

Every failure of ``decide`` surfaces as one of these; nothing is retried
internally. ``BusinessSyncFailed`` is the only one that means a write has
already landed: the credential is decided, the business flag is not.
"""


class VerificationError(Exception):
    message = 'Verification failed.'

    def __init__(self, message=None, credential=None):
        self.credential = credential
        super().__init__(message or self.message)


class InvalidOutcome(VerificationError, ValueError):
    message = 'A decision must be either verified or rejected.'


class NotFound(VerificationError):
    message = 'Record not found.'


class CredentialNotFound(NotFound):
    message = 'Credential not found.'


class BusinessNotFound(NotFound):
    message = 'The business owning this credential no longer exists.'


class AuthorizationFailure(VerificationError):
    message = 'Not authorized.'


class ReviewerRequired(AuthorizationFailure):
    message = 'A signed-in reviewer is required to record a decision.'


class Conflict(VerificationError):
    message = 'The credential changed while the decision was being recorded.'


class AlreadyDecided(Conflict):
    message = 'This credential has already been decided.'


class CredentialNotVerified(Conflict):
    message = 'Only a verified credential can mark its business as verified.'


class StorageFailure(VerificationError):
    message = 'The record store could not complete the request.'


class CredentialWriteFailed(StorageFailure):
    message = 'The decision could not be saved. Nothing was changed.'


class BusinessSyncFailed(StorageFailure):
    message = 'Credential verified but the business flag was not updated. Retry the sync.'

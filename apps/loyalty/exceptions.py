"""
Loyalty domain errors.

Every error carries the HTTP status the API layer answers with, so views can
simply let them propagate to ``apps.common.exceptions.custom_exception_handler``.
"""


class LoyaltyError(Exception):
    """Base class for loyalty ledger errors"""
    status_code = 400
    default_code = 'loyalty_error'
    default_message = 'Loyalty operation failed'

    def __init__(self, message=None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def as_dict(self):
        data = {'detail': self.message, 'code': self.default_code}
        data.update(self.context)
        return data


class ValidationError(LoyaltyError):
    """Malformed request, rejected before any write"""
    status_code = 400
    default_code = 'invalid'
    default_message = 'Invalid loyalty request'


class InsufficientPointsError(LoyaltyError):
    """The customer does not hold enough points for the debit"""
    status_code = 409
    default_code = 'insufficient_points'
    default_message = 'Insufficient loyalty points'

    def __init__(self, message=None, requested=None, available=None):
        if message is None and requested is not None:
            message = f"Insufficient loyalty points. Requested: {requested}, available: {available}"
        super().__init__(message, requested=requested, available=available)
        self.requested = requested
        self.available = available


class ConcurrencyConflictError(LoyaltyError):
    """A concurrent write changed the balance between check and commit"""
    status_code = 409
    default_code = 'concurrency_conflict'
    default_message = 'The balance changed while the operation was in progress, please retry'


class PersistenceError(LoyaltyError):
    """The ledger storage failed"""
    status_code = 503
    default_code = 'persistence_error'
    default_message = 'Loyalty ledger is temporarily unavailable'


class RewardNotFoundError(LoyaltyError):
    """No reward with the requested id exists"""
    status_code = 404
    default_code = 'reward_not_found'
    default_message = 'Reward not found'


class RewardUnavailableError(LoyaltyError):
    """The reward exists but cannot be redeemed right now"""
    status_code = 409
    default_code = 'reward_unavailable'
    default_message = 'Reward is not available'

    def __init__(self, message=None, reward_id=None, reason=None):
        super().__init__(message, reward_id=reward_id, reason=reason)
        self.reward_id = reward_id
        self.reason = reason

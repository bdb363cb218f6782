# --- services/payments.py ---
from flask import current_app

EXTENSION_KEY = "simoly.payments"


class PaymentVerifier:
    """Asks the payment collaborator whether a charge for a plan succeeded.

    Paid-plan registrations are only completed once this answers ``True``.
    Without a gateway nothing is ever confirmed.
    """

    def is_confirmed(self, reference, plan) -> bool:
        current_app.logger.warning(
            "No payment gateway configured, payment %r for plan %s not confirmed",
            reference,
            plan.id,
        )
        return False


def init_payments(app, verifier=None):
    app.extensions[EXTENSION_KEY] = verifier or PaymentVerifier()


def get_verifier() -> PaymentVerifier:
    return current_app.extensions[EXTENSION_KEY]

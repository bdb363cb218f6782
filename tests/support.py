from simoly.services.payments import PaymentVerifier


class ConfirmedPayments(PaymentVerifier):
    def __init__(self, references=()):
        self.references = set(references)

    def is_confirmed(self, reference, plan):
        return reference in self.references


class FakeOAuthClient:
    def __init__(self, profile=None, error=None, configured=True):
        self.profile = profile
        self.error = error
        self.configured = configured
        self.calls = []

    def authorize_url(self, redirect_uri, state):
        return f"https://provider.test/authorize?state={state}&redirect_uri={redirect_uri}"

    def fetch_profile(self, code, redirect_uri):
        self.calls.append((code, redirect_uri))
        if self.error:
            raise self.error
        return self.profile

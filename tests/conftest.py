import pytest

from simoly import create_app
from simoly.config import TestingConfig
from simoly.extensions import db
from simoly.model import ROLE_ADMIN, Profile, SubscriptionPlan
from simoly.services.oauth_clients import ExternalProfile
from support import FakeOAuthClient


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        db.session.add_all([
            SubscriptionPlan(id="free", name="Gratuito", price=0),
            SubscriptionPlan(id="pro", name="Professionale", price=2900, is_popular=True),
        ])
        db.session.commit()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def bearer():
    return lambda token: {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    def _register(email="a@x.com", password="secret1", first_name="A", last_name="B", **extra):
        body = {"email": email, "password": password, "firstName": first_name, "lastName": last_name}
        body.update(extra)
        return client.post("/register", json=body)
    return _register


@pytest.fixture
def admin_token(app, register):
    resp = register(email="admin@x.com", first_name="Ada", last_name="Admin")
    with app.app_context():
        profile = Profile.query.filter_by(email="admin@x.com").one()
        profile.role = ROLE_ADMIN
        db.session.commit()
    return resp.get_json()["data"]["token"]


@pytest.fixture
def oauth_client(app):
    """Swap the provider clients for fakes; returns a setter per provider."""
    def _install(provider, **kwargs):
        fake = FakeOAuthClient(**kwargs)
        app.extensions["simoly.oauth"][provider] = fake
        return fake
    return _install


@pytest.fixture
def google_profile():
    return ExternalProfile(provider_id="g-123", email="new@x.com", first_name="Gina", last_name="Google")

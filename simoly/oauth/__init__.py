from flask import Blueprint

bp = Blueprint("oauth", __name__)

from . import routes  # noqa: E402,F401

from flask import jsonify

from . import bp
from ..services.plan_service import list_plans
from ..utils.api import api_ok


@bp.get("/plans")
def index():
    return jsonify(api_ok(data={"plans": [p.as_dict() for p in list_plans()]})), 200

from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from . import bp
from ..errors import TransientStoreFailure
from ..extensions import db
from ..services import user_service
from ..utils.api import api_ok, json_body
from ..utils.decorators import admin_required


@bp.errorhandler(SQLAlchemyError)
def store_failure(err):
    db.session.rollback()
    current_app.logger.exception("Admin store failure: %s", err)
    return TransientStoreFailure("Errore interno del server, riprova più tardi").to_response()


@bp.get("/users")
@admin_required
def list_users():
    users = [u.as_admin_dict() for u in user_service.list_users()]
    return jsonify(api_ok(data=users)), 200


@bp.get("/users/<user_id>")
@admin_required
def get_user(user_id):
    return jsonify(api_ok(data=user_service.get_user(user_id).as_admin_dict())), 200


@bp.post("/users")
@admin_required
def create_user():
    data = json_body()
    user = user_service.create_user(data)
    return jsonify(api_ok("Utente creato con successo", data=user.as_admin_dict())), 201


@bp.put("/users/<user_id>/role")
@admin_required
def update_user_role(user_id):
    data = json_body()
    user = user_service.update_role(user_id, data.get("role"))
    return jsonify(api_ok("Ruolo aggiornato con successo", data=user.as_admin_dict())), 200


@bp.delete("/users/<user_id>")
@admin_required
def delete_user(user_id):
    user_service.delete_user(user_id)
    return jsonify(api_ok("Utente eliminato con successo")), 200

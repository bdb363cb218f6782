# --- services/tokens.py ---
from flask_jwt_extended import create_access_token


def issue_token(profile) -> str:
    # role is informational only; privileged routes re-read it
    return create_access_token(
        identity=str(profile.id),
        additional_claims={"email": profile.email, "role": profile.role},
    )

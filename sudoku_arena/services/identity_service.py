"""
Identity Service

Issues anonymous player identities as signed JWT tokens. There are no
accounts or passwords: a token carries a generated player id and the chosen
display name, and is the only credential rooms and sockets need.
"""

import datetime
import uuid
from typing import Any, Dict, Optional

import jwt

MAX_NAME_LENGTH = 24


class IdentityService:
    """
    Token service for anonymous players.
    """

    def __init__(self, jwt_secret: str, expiration_days: int = 30):
        """
        Args:
            jwt_secret: Secret key for JWT token generation
            expiration_days: Token lifetime
        """
        self.jwt_secret = jwt_secret
        self.expiration_days = expiration_days

    def register_player(self, name: str) -> Dict[str, Any]:
        """
        Create a new anonymous player identity.

        Args:
            name: Display name shown to opponents

        Returns:
            Dictionary with success status, token and player, or error
        """
        if not isinstance(name, str) or not name.strip():
            return {"success": False, "error": "Player name is required"}

        name = name.strip()
        if len(name) > MAX_NAME_LENGTH:
            return {"success": False, "error": f"Player name must be at most {MAX_NAME_LENGTH} characters"}

        player_id = uuid.uuid4().hex
        token_payload = {
            "player_id": player_id,
            "name": name,
            "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=self.expiration_days)
        }
        token = jwt.encode(token_payload, self.jwt_secret, algorithm="HS256")

        return {
            "success": True,
            "token": token,
            "player": {"id": player_id, "name": name}
        }

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a player token.

        Args:
            token: JWT token string

        Returns:
            Dictionary with success status and player data or error
        """
        try:
            if not token:
                return {"success": False, "error": "Token is required"}

            payload = jwt.decode(token, self.jwt_secret, algorithms=["HS256"])
            player_id = payload.get("player_id")
            name = payload.get("name")

            if not player_id or not name:
                return {"success": False, "error": "Invalid token payload"}

            return {"success": True, "player": {"id": player_id, "name": name}}

        except jwt.ExpiredSignatureError:
            return {"success": False, "error": "Token has expired"}
        except jwt.InvalidTokenError:
            return {"success": False, "error": "Invalid token"}


# Global service instance
_identity_service = None


def get_identity_service() -> Optional[IdentityService]:
    """Get the global identity service instance."""
    return _identity_service


def initialize_identity_service(jwt_secret: str, expiration_days: int = 30) -> IdentityService:
    """Initialize the global identity service instance."""
    global _identity_service
    _identity_service = IdentityService(jwt_secret, expiration_days)
    return _identity_service

import os
from typing import Optional, Dict, Any

import firebase_admin
import structlog
from firebase_admin import auth, credentials

from ..config import get_settings
from ..models.user import User
from ..repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)

_firebase_app = None

def initialize_firebase():
    global _firebase_app
    if _firebase_app is None:
        settings = get_settings()
        try:
            if os.path.exists(settings.firebase_service_account_path):
                cred = credentials.Certificate(settings.firebase_service_account_path)
            else:
                cred = credentials.ApplicationDefault()

            options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
            _firebase_app = firebase_admin.initialize_app(cred, options)
        except Exception as e:
            logger.error("firebase_initialization_failed", error=str(e))
            return None
    return _firebase_app

def verify_firebase_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        app = initialize_firebase()
        if not app:
            logger.warning("firebase_app_not_initialized")
            return None
        return auth.verify_id_token(token, app=app)
    except Exception as e:
        logger.info("token_verification_failed", error=str(e))
        return None

def get_or_create_user(users: UserRepository, firebase_uid: str, email: str, full_name: str) -> User:
    return users.get_or_create(
        user_id=firebase_uid,
        firebase_uid=firebase_uid,
        email=email,
        full_name=full_name,
    )

# Importing the models registers their tables on BaseModel.metadata.
from console_api.infrastructure.database.models.user_model import UserModel
from console_api.infrastructure.database.models.session_model import SessionModel
from console_api.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from console_api.infrastructure.database.models.password_reset_token_model import PasswordResetTokenModel
from console_api.infrastructure.database.models.email_change_token_model import EmailChangeTokenModel

__all__ = [
    "UserModel",
    "SessionModel",
    "RefreshTokenModel",
    "PasswordResetTokenModel",
    "EmailChangeTokenModel",
]

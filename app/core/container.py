from dataclasses import dataclass

from ..application.services.profile_service import ProfileService
from ..application.services.session_service import SessionService
from ..domain.ports.media import MediaStorage
from ..domain.ports.persistence import UserRepository
from ..services.token_service import TokenIssuer
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    users: UserRepository
    media_storage: MediaStorage
    token_issuer: TokenIssuer
    session_service: SessionService
    profile_service: ProfileService

"""
Operations Layer

This package provides business logic operations that compose database methods
into complete workflows. Operations modules handle multi-step transactions,
validation, permission checks and activity logging while the database layer
stays pure data access.

Architecture:
- Database layer: Pure data access and CRUD operations
- Operations layer: Business logic composition and workflows
- Route layer: HTTP integration (FastAPI routers) and request/response models

Each operations module focuses on a specific domain:
- AuthOperations: User accounts, password hashing and strength rules
- AdminOperations: User management and impersonation
- ClubOperations: Clubs and ownership checks
- SeasonOperations: Seasons, points systems and points allocations
- PlayerOperations: Players and phone de-duplication
- TournamentOperations: Tournaments, finalization and dashboard stats
- RegistrationOperations: Registrations, payments, pending actions and activity
"""

from .auth_operations import AuthOperations
from .admin_operations import AdminOperations
from .club_operations import ClubOperations
from .season_operations import SeasonOperations
from .player_operations import PlayerOperations
from .tournament_operations import TournamentOperations
from .registration_operations import RegistrationOperations

__all__ = [
    'AuthOperations', 'AdminOperations', 'ClubOperations', 'SeasonOperations',
    'PlayerOperations', 'TournamentOperations', 'RegistrationOperations',
]

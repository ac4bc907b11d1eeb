"""
Application-wide constants for PokerPal.

This module contains the payout tables, display labels and limits used
throughout the codebase to keep magic numbers in one place.
"""

class PayoutConstants:
    """Payout percentages by finishing position for each payout structure."""

    STANDARD = [0.50, 0.30, 0.20]
    TOP_3 = [0.50, 0.30, 0.20]
    TOP_5 = [0.40, 0.25, 0.20, 0.10, 0.05]
    TOP_8 = [0.35, 0.22, 0.15, 0.12, 0.08, 0.04, 0.02, 0.02]
    TOP_9 = [0.30, 0.20, 0.15, 0.12, 0.09, 0.06, 0.04, 0.02, 0.02]

    STRUCTURES = {
        'standard': STANDARD,
        'top3': TOP_3,
        'top5': TOP_5,
        'top8': TOP_8,
        'top9': TOP_9,
    }

    DEFAULT_STRUCTURE = 'standard'

class TournamentConstants:
    """Constants for tournament setup and display."""

    STATUS_LABELS = {
        'scheduled': 'Scheduled',
        'registration': 'Registration Open',
        'in_progress': 'In Progress',
        'completed': 'Completed',
        'cancelled': 'Cancelled',
    }

    # Statuses counted as "active" on the dashboard
    ACTIVE_STATUSES = ('registration', 'in_progress')

    DEFAULT_MIN_PLAYERS = 8
    MIN_HIGH_HAND_PAYOUTS = 1
    MAX_HIGH_HAND_PAYOUTS = 4

class PasswordConstants:
    """Password strength requirements."""

    MIN_LENGTH = 8

class UploadConstants:
    """Constants for image uploads."""

    MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
    ALLOWED_MIME_TYPES = ('image/jpeg', 'image/png', 'image/gif', 'image/webp')
    DEFAULT_ENTITY_TYPE = 'misc'
    FIELD_NAME = 'image'
    URL_PREFIX = '/uploads'

class SessionKeys:
    """Keys stored in the signed session cookie."""

    USER_ID = 'user_id'
    ROLE = 'role'
    ORIGINAL_ADMIN_ID = 'original_admin_id'
    ORIGINAL_ADMIN_ROLE = 'original_admin_role'

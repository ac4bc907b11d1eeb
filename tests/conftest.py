"""
Shared fixtures: a fresh SQLite database per test and an HTTP client bound to
the application through httpx's ASGI transport.
"""

import os
import tempfile

# Logs from the suite stay out of the working tree
os.environ.setdefault('LOG_DIR', os.path.join(tempfile.gettempdir(), 'pokerpal-test-logs'))

import pytest
from httpx import ASGITransport, AsyncClient

from pokerpal.config import Config
from pokerpal.database.models import UserRole
from pokerpal.main import create_app
from pokerpal.services.image_storage import ImageStorage

# Minimum bcrypt cost keeps the suite fast
Config.BCRYPT_ROUNDS = 4

ADMIN_EMAIL = 'admin@pokerpal.test'
MEMBER_EMAIL = 'member@pokerpal.test'
PASSWORD = 'Secret123'


@pytest.fixture
async def app(tmp_path):
    storage = ImageStorage(upload_dir=str(tmp_path / 'uploads'), use_cloud=False)
    application = create_app(database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", storage=storage)
    await application.state.db.initialize()
    yield application
    await application.state.db.close()


@pytest.fixture
def db(app):
    return app.state.db


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


async def register(client, email, name, password=PASSWORD):
    response = await client.post('/api/auth/register', json={'email': email, 'password': password, 'name': name})
    assert response.status_code == 201, response.text
    return response.json()['user']


async def login(client, email, password=PASSWORD):
    response = await client.post('/api/auth/login', json={'email': email, 'password': password})
    assert response.status_code == 200, response.text
    return response.json()['user']


@pytest.fixture
async def admin(client, db):
    """Logged-in admin; the client's session belongs to this user."""
    user = await register(client, ADMIN_EMAIL, 'Alice Admin')
    await db.update_user(user['id'], {'role': UserRole.ADMIN})
    return await login(client, ADMIN_EMAIL)


@pytest.fixture
async def member(client):
    """Logged-in full member; the client's session belongs to this user."""
    return await register(client, MEMBER_EMAIL, 'Morgan Member')


# Domain builders used across the HTTP tests

async def create_club(client, name='River Rats Poker', **fields):
    response = await client.post('/api/clubs', json={'name': name, **fields})
    assert response.status_code == 201, response.text
    return response.json()


async def create_season(client, club_id, name='Fall 2026'):
    response = await client.post('/api/seasons', json={
        'name': name,
        'clubId': club_id,
        'startDate': '2026-09-01T00:00:00Z',
    })
    assert response.status_code == 201, response.text
    return response.json()


async def create_player(client, name, phone=None):
    body = {'name': name}
    if phone:
        body['phone'] = phone
    response = await client.post('/api/players', json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def create_tournament(client, club_id, **fields):
    body = {
        'name': 'Friday Night Hold\'em',
        'clubId': club_id,
        'startDateTime': '2026-11-06T19:00:00Z',
        'buyInAmount': 100,
        'maxPlayers': 10,
    }
    body.update(fields)
    response = await client.post('/api/tournaments', json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def register_player(client, tournament_id, player_id, **fields):
    response = await client.post(
        f'/api/tournaments/{tournament_id}/registrations',
        json={'playerId': player_id, **fields}
    )
    assert response.status_code == 201, response.text
    return response.json()


async def activity_descriptions(client, tournament_id):
    response = await client.get(f'/api/tournaments/{tournament_id}/activity')
    assert response.status_code == 200, response.text
    return [entry['description'] for entry in response.json()]

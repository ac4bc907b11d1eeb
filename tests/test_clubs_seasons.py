"""
Clubs, seasons, points systems and points allocations.
"""

from conftest import ADMIN_EMAIL, MEMBER_EMAIL, create_club, create_season, login, register

from pokerpal.utils.slugs import slugify


class TestSlugs:
    def test_slugify(self):
        assert slugify("  River Rats' Poker Club!  ") == 'river-rats-poker-club'
        assert slugify('Aces & Eights -- 2026') == 'aces-eights-2026'
        assert slugify('!!!') == ''


class TestClubs:
    async def test_create_derives_slug_and_owner(self, client, member):
        club = await create_club(client, 'River Rats Poker', address='1 Main St')

        assert club['slug'] == 'river-rats-poker'
        assert club['ownerId'] == member['id']
        assert club['address'] == '1 Main St'

        by_slug = await client.get('/api/clubs/slug/river-rats-poker')
        assert by_slug.status_code == 200
        assert by_slug.json()['id'] == club['id']

        listed = await client.get('/api/clubs')
        assert [c['id'] for c in listed.json()] == [club['id']]

    async def test_duplicate_slug_conflicts(self, client, member):
        await create_club(client, 'River Rats Poker')

        response = await client.post('/api/clubs', json={'name': 'Another', 'slug': 'River Rats Poker'})

        assert response.status_code == 409
        assert response.json()['error'] == 'A club with this slug already exists'

    async def test_create_requires_login(self, client):
        response = await client.post('/api/clubs', json={'name': 'Nope'})
        assert response.status_code == 401

    async def test_unknown_club(self, client):
        assert (await client.get('/api/clubs/missing')).status_code == 404
        assert (await client.get('/api/clubs/slug/missing')).json()['error'] == 'Club not found'

    async def test_owner_updates_and_deletes(self, client, member):
        club = await create_club(client)

        response = await client.put(f"/api/clubs/{club['id']}", json={'description': 'Weekly games'})
        assert response.status_code == 200
        assert response.json()['description'] == 'Weekly games'
        assert response.json()['slug'] == club['slug']

        response = await client.delete(f"/api/clubs/{club['id']}")
        assert response.status_code == 204
        assert (await client.get(f"/api/clubs/{club['id']}")).status_code == 404

    async def test_other_members_cannot_manage(self, client, member):
        club = await create_club(client)
        await register(client, 'other@example.com', 'Other Member')

        assert (await client.put(f"/api/clubs/{club['id']}", json={'name': 'Mine now'})).status_code == 403
        assert (await client.delete(f"/api/clubs/{club['id']}")).status_code == 403

    async def test_admin_manages_any_club(self, client, admin):
        await register(client, MEMBER_EMAIL, 'Morgan Member')
        club = await create_club(client)
        await login(client, ADMIN_EMAIL)

        response = await client.put(f"/api/clubs/{club['id']}", json={'name': 'Renamed'})

        assert response.status_code == 200
        assert response.json()['name'] == 'Renamed'

    async def test_members_count_counts_distinct_players(self, client, member):
        club = await create_club(client)
        players = []
        for name in ('Ann', 'Bob'):
            players.append((await client.post('/api/players', json={'name': name})).json())

        for start in ('2026-11-06T19:00:00Z', '2026-11-13T19:00:00Z'):
            tournament = (await client.post('/api/tournaments', json={
                'name': 'Weekly', 'clubId': club['id'], 'startDateTime': start,
                'buyInAmount': 50, 'maxPlayers': 9,
            })).json()
            for player in players:
                await client.post(f"/api/tournaments/{tournament['id']}/registrations",
                                  json={'playerId': player['id']})

        response = await client.get(f"/api/clubs/{club['id']}/members-count")

        assert response.json() == {'count': 2}


class TestSeasons:
    async def test_season_crud(self, client, member):
        club = await create_club(client)
        season = await create_season(client, club['id'])

        assert season['clubId'] == club['id']
        assert season['isActive'] is True
        assert season['startDate'] == '2026-09-01T00:00:00Z'

        listed = await client.get('/api/seasons', params={'clubId': club['id']})
        assert [s['id'] for s in listed.json()] == [season['id']]
        assert (await client.get('/api/seasons', params={'clubId': 'other'})).json() == []

        response = await client.put(f"/api/seasons/{season['id']}", json={'isActive': False})
        assert response.json()['isActive'] is False

        assert (await client.delete(f"/api/seasons/{season['id']}")).status_code == 204
        assert (await client.get(f"/api/seasons/{season['id']}")).status_code == 404

    async def test_season_for_unknown_club(self, client, member):
        response = await client.post('/api/seasons', json={
            'name': 'Orphan', 'clubId': 'missing', 'startDate': '2026-09-01T00:00:00Z'
        })
        assert response.status_code == 404

    async def test_offset_dates_stored_as_utc(self, client, member):
        club = await create_club(client)
        response = await client.post('/api/seasons', json={
            'name': 'Winter', 'clubId': club['id'], 'startDate': '2026-12-01T00:00:00-05:00'
        })

        assert response.json()['startDate'] == '2026-12-01T05:00:00Z'


class TestPointsSystems:
    async def test_points_system_and_allocations(self, client, member):
        club = await create_club(client)
        season = await create_season(client, club['id'])

        response = await client.post(f"/api/seasons/{season['id']}/points-systems", json={
            'name': 'Standard', 'participationPoints': 10, 'knockoutPoints': 5
        })
        assert response.status_code == 201
        system = response.json()
        assert system['seasonId'] == season['id']

        for body in ({'position': 2, 'points': 75}, {'position': 1, 'points': 100},
                     {'position': 3, 'positionEnd': 5, 'points': 40}):
            created = await client.post(f"/api/points-systems/{system['id']}/allocations", json=body)
            assert created.status_code == 201

        allocations = (await client.get(f"/api/points-systems/{system['id']}/allocations")).json()
        assert [a['position'] for a in allocations] == [1, 2, 3]
        assert allocations[2]['positionEnd'] == 5

        response = await client.put(f"/api/points-allocations/{allocations[0]['id']}", json={'points': 120})
        assert response.json()['points'] == 120

        assert (await client.delete(f"/api/points-allocations/{allocations[1]['id']}")).status_code == 204
        remaining = (await client.get(f"/api/points-systems/{system['id']}/allocations")).json()
        assert len(remaining) == 2

        listed = await client.get(f"/api/seasons/{season['id']}/points-systems")
        assert [s['name'] for s in listed.json()] == ['Standard']

        response = await client.put(f"/api/points-systems/{system['id']}", json={'knockoutPoints': 8})
        assert response.json()['knockoutPoints'] == 8

    async def test_range_end_before_start_rejected(self, client, member):
        club = await create_club(client)
        season = await create_season(client, club['id'])
        system = (await client.post(f"/api/seasons/{season['id']}/points-systems", json={'name': 'S'})).json()

        response = await client.post(f"/api/points-systems/{system['id']}/allocations", json={
            'position': 5, 'positionEnd': 3, 'points': 10
        })
        assert response.status_code == 400
        assert response.json()['error'] == 'Position end must be greater than or equal to position'

        allocation = (await client.post(f"/api/points-systems/{system['id']}/allocations", json={
            'position': 4, 'positionEnd': 6, 'points': 10
        })).json()
        response = await client.put(f"/api/points-allocations/{allocation['id']}", json={'position': 7})
        assert response.status_code == 400

    async def test_deleting_season_removes_points_systems(self, client, member):
        club = await create_club(client)
        season = await create_season(client, club['id'])
        system = (await client.post(f"/api/seasons/{season['id']}/points-systems", json={'name': 'S'})).json()

        await client.delete(f"/api/seasons/{season['id']}")

        assert (await client.get(f"/api/points-systems/{system['id']}")).status_code == 404

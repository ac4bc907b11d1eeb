"""
End-to-end tournament lifecycle through the HTTP API.

Setup: club, season, points system, allocations, players, tournament and
registrations. In progress: eliminations, knockouts, re-buys, add-ons and
status changes. Final table: finalization assigns positions, prizes and
points, feeding the season leaderboard. Cleanup: deleting the club cascades.
"""

from decimal import Decimal

import pytest

from conftest import MEMBER_EMAIL, activity_descriptions, create_club, create_player, create_season, create_tournament, register, register_player


@pytest.fixture
async def setup(client, admin):
    club = await create_club(client, 'Final Table Club')
    season = await create_season(client, club['id'])

    system = (await client.post(f"/api/seasons/{season['id']}/points-systems", json={
        'name': 'League', 'participationPoints': 10, 'knockoutPoints': 5
    })).json()
    for body in ({'position': 1, 'points': 100}, {'position': 2, 'points': 75},
                 {'position': 3, 'points': 50}, {'position': 4, 'positionEnd': 6, 'points': 25}):
        await client.post(f"/api/points-systems/{system['id']}/allocations", json=body)

    tournament = await create_tournament(
        client, club['id'],
        seasonId=season['id'],
        pointsSystemId=system['id'],
        rebuyAmount=100,
        addonAmount=50,
        rakeType='percentage',
        rakeAmount=10,
        enableHighHand=True,
        highHandAmount=20,
        highHandPayouts=2,
    )

    players = [await create_player(client, f'Player {n}') for n in range(1, 7)]
    registrations = [
        await register_player(client, tournament['id'], player['id'], enteringHighHands=index < 2)
        for index, player in enumerate(players)
    ]

    return {
        'club': club, 'season': season, 'system': system, 'tournament': tournament,
        'players': players, 'registrations': registrations,
    }


async def put_registration(client, registration_id, **fields):
    response = await client.put(f'/api/registrations/{registration_id}', json=fields)
    assert response.status_code == 200, response.text
    return response.json()


class TestTournamentSetup:
    async def test_created_with_defaults(self, setup):
        tournament = setup['tournament']

        assert tournament['status'] == 'scheduled'
        assert tournament['payoutStructure'] == 'standard'
        assert tournament['minPlayers'] == 8
        assert tournament['trackPoints'] is True
        assert tournament['highHandPayouts'] == 2
        assert Decimal(tournament['buyInAmount']) == Decimal('100')

    async def test_listing_counts_confirmed_players(self, client, setup):
        registrations = setup['registrations']
        for registration in registrations[:2]:
            await client.patch(f"/api/registrations/{registration['id']}/confirm-payment")

        listed = await client.get('/api/tournaments', params={'clubId': setup['club']['id']})

        assert listed.status_code == 200
        assert listed.json()[0]['confirmedPlayerCount'] == 2

        by_season = await client.get('/api/tournaments', params={'seasonId': setup['season']['id']})
        assert [t['id'] for t in by_season.json()] == [setup['tournament']['id']]

    @pytest.mark.parametrize('field, value', [('maxPlayers', 0), ('buyInAmount', -5), ('highHandPayouts', 5)])
    async def test_invalid_tournament_rejected(self, client, setup, field, value):
        response = await client.post('/api/tournaments', json={
            'name': 'Bad', 'clubId': setup['club']['id'], 'startDateTime': '2026-11-06T19:00:00Z',
            'buyInAmount': 100, 'maxPlayers': 10, field: value,
        })
        assert response.status_code == 400

    async def test_unknown_club_rejected(self, client, setup):
        response = await client.post('/api/tournaments', json={
            'name': 'Bad', 'clubId': 'missing', 'startDateTime': '2026-11-06T19:00:00Z',
            'buyInAmount': 100, 'maxPlayers': 10,
        })
        assert response.status_code == 404

    async def test_registrations_embed_players(self, client, setup):
        response = await client.get(f"/api/tournaments/{setup['tournament']['id']}/registrations")

        names = [registration['player']['name'] for registration in response.json()]
        assert names == [f'Player {n}' for n in range(1, 7)]


class TestTournamentInProgress:
    async def test_status_change_is_logged(self, client, setup):
        tournament_id = setup['tournament']['id']

        response = await client.put(f'/api/tournaments/{tournament_id}', json={'status': 'in_progress'})

        assert response.status_code == 200
        assert response.json()['status'] == 'in_progress'
        descriptions = await activity_descriptions(client, tournament_id)
        assert descriptions[0] == 'Tournament status changed to In Progress'

    async def test_patch_has_no_side_effects(self, client, setup):
        tournament_id = setup['tournament']['id']
        before = await activity_descriptions(client, tournament_id)

        response = await client.patch(f'/api/tournaments/{tournament_id}', json={'status': 'registration'})

        assert response.json()['status'] == 'registration'
        assert await activity_descriptions(client, tournament_id) == before

    async def test_null_for_required_fields_rejected(self, client, setup):
        tournament_id = setup['tournament']['id']

        response = await client.patch(f'/api/tournaments/{tournament_id}', json={'status': None, 'name': None})

        assert response.status_code == 400
        assert response.json()['error'] == 'Invalid request data'
        tournament = (await client.get(f'/api/tournaments/{tournament_id}')).json()
        assert tournament['status'] == 'scheduled'
        assert tournament['name'] == setup['tournament']['name']

    async def test_null_for_optional_fields_clears_them(self, client, setup):
        tournament_id = setup['tournament']['id']

        response = await client.patch(f'/api/tournaments/{tournament_id}', json={'highHandAmount': None})

        assert response.status_code == 200
        assert response.json()['highHandAmount'] is None

    async def test_put_requires_club_owner_or_admin(self, client, setup):
        await register(client, MEMBER_EMAIL, 'Morgan Member')
        tournament_id = setup['tournament']['id']

        assert (await client.put(f'/api/tournaments/{tournament_id}', json={'name': 'Mine'})).status_code == 403
        assert (await client.delete(f'/api/tournaments/{tournament_id}')).status_code == 403

    async def test_prize_pool_tracks_entries(self, client, setup):
        registrations = setup['registrations']
        await put_registration(client, registrations[1]['id'], rebuys=1)
        await put_registration(client, registrations[2]['id'], addons=1)

        response = await client.get(f"/api/tournaments/{setup['tournament']['id']}/prize-pool")

        pool = response.json()
        assert Decimal(pool['grossTotal']) == Decimal('750')
        assert Decimal(pool['rake']) == Decimal('60')
        assert Decimal(pool['netPrizePool']) == Decimal('690')
        assert [Decimal(line['amount']) for line in pool['payouts']] == [Decimal('345'), Decimal('207'), Decimal('138')]
        assert pool['highHand']['entrants'] == 2
        assert Decimal(pool['highHand']['perWinner']) == Decimal('20')

    async def test_dashboard_stats(self, client, setup):
        await client.put(f"/api/tournaments/{setup['tournament']['id']}", json={'status': 'registration'})

        stats = (await client.get('/api/dashboard/stats')).json()

        assert stats['activeTournaments'] == 1
        assert stats['totalPlayers'] == 6
        assert stats['activeClubs'] == 1
        assert Decimal(stats['totalPrizePool']) == Decimal('540')


class TestFinalTable:
    async def test_finalize_assigns_positions_prizes_and_points(self, client, setup):
        tournament_id = setup['tournament']['id']
        players = setup['players']
        registrations = setup['registrations']

        await client.put(f'/api/tournaments/{tournament_id}', json={'status': 'in_progress'})
        await put_registration(client, registrations[1]['id'], rebuys=1)
        await put_registration(client, registrations[2]['id'], addons=1)

        # Player 6 goes out first, then Player 5, then Player 4; Player 1 takes two of them
        await put_registration(client, registrations[5]['id'], isEliminated=True, eliminatedBy=players[0]['id'])
        await put_registration(client, registrations[4]['id'], isEliminated=True)
        await put_registration(client, registrations[3]['id'], isEliminated=True, eliminatedBy=players[0]['id'])
        await put_registration(client, registrations[0]['id'], knockouts=2)

        response = await client.post(f'/api/tournaments/{tournament_id}/finalize')

        assert response.status_code == 200, response.text
        body = response.json()
        assert body['message'] == 'Tournament finalized - positions, prizes, and points assigned'
        assert body['tournament']['status'] == 'completed'
        assert Decimal(body['netPrizePool']) == Decimal('690')

        results = {result['player']['name']: result for result in body['results']}
        assert [results[f'Player {n}']['finalPosition'] for n in range(1, 7)] == [1, 2, 3, 4, 5, 6]
        assert Decimal(results['Player 1']['prizeAmount']) == Decimal('345')
        assert Decimal(results['Player 2']['prizeAmount']) == Decimal('207')
        assert Decimal(results['Player 3']['prizeAmount']) == Decimal('138')
        assert results['Player 4']['prizeAmount'] is None
        assert [results[f'Player {n}']['pointsAwarded'] for n in range(1, 7)] == [110, 75, 50, 25, 25, 25]

        descriptions = await activity_descriptions(client, tournament_id)
        assert descriptions[0] == 'Tournament finalized - positions, prizes, and points assigned'

        leaderboard = (await client.get(f"/api/seasons/{setup['season']['id']}/leaderboard")).json()
        assert leaderboard['tournamentsCounted'] == 1
        assert [(e['rank'], e['player']['name'], e['points']) for e in leaderboard['entries']] == [
            (1, 'Player 1', 110), (2, 'Player 2', 75), (3, 'Player 3', 50),
            (4, 'Player 4', 25), (5, 'Player 5', 25), (6, 'Player 6', 25),
        ]

        stats = (await client.get('/api/dashboard/stats')).json()
        assert stats['activeTournaments'] == 0
        assert Decimal(stats['totalPrizePool']) == Decimal('690')

    async def test_finalize_without_points_tracking(self, client, setup):
        tournament_id = setup['tournament']['id']
        await client.put(f'/api/tournaments/{tournament_id}', json={'trackPoints': False})

        body = (await client.post(f'/api/tournaments/{tournament_id}/finalize')).json()

        assert all(result['pointsAwarded'] is None for result in body['results'])
        assert (await client.get(f"/api/seasons/{setup['season']['id']}/leaderboard")).json()['entries'] == []

    async def test_cancelled_tournament_cannot_be_finalized(self, client, setup):
        tournament_id = setup['tournament']['id']
        await client.put(f'/api/tournaments/{tournament_id}', json={'status': 'cancelled'})

        response = await client.post(f'/api/tournaments/{tournament_id}/finalize')

        assert response.status_code == 400
        assert response.json()['error'] == 'Cannot finalize a cancelled tournament'

    async def test_finalize_unknown_tournament(self, client, setup):
        assert (await client.post('/api/tournaments/missing/finalize')).status_code == 404


async def play_tournament(client, club_id, season_id, system_id, name, finishers):
    """Run a tournament to completion; ``finishers`` lists players best first."""
    tournament = await create_tournament(client, club_id, name=name, seasonId=season_id, pointsSystemId=system_id)
    registrations = [await register_player(client, tournament['id'], player['id']) for player in finishers]

    # Worst finisher is knocked out first
    for hour, registration in enumerate(reversed(registrations[1:]), start=20):
        await put_registration(
            client, registration['id'], isEliminated=True, eliminationTime=f'2026-11-06T{hour}:00:00Z'
        )

    response = await client.post(f"/api/tournaments/{tournament['id']}/finalize")
    assert response.status_code == 200, response.text
    return response.json()


class TestSeasonLeaderboard:
    async def test_points_accumulate_across_tournaments(self, client, admin):
        club = await create_club(client, 'League Night Club')
        season = await create_season(client, club['id'], name='Winter 2026')
        system = (await client.post(f"/api/seasons/{season['id']}/points-systems", json={'name': 'Top Three'})).json()
        for position, points in ((1, 50), (2, 30), (3, 20)):
            await client.post(f"/api/points-systems/{system['id']}/allocations",
                              json={'position': position, 'points': points})
        ann, bob, cal, dee, eve = [await create_player(client, name) for name in ('Ann', 'Bob', 'Cal', 'Dee', 'Eve')]

        await play_tournament(client, club['id'], season['id'], system['id'], 'Week 1', [ann, bob, cal, dee])
        await play_tournament(client, club['id'], season['id'], system['id'], 'Week 2', [eve, cal, bob, dee])

        leaderboard = (await client.get(f"/api/seasons/{season['id']}/leaderboard")).json()

        assert leaderboard['tournamentsCounted'] == 2
        # Everyone on 50: two tournaments beat one, then names break the tie
        assert [(e['rank'], e['player']['name'], e['points'], e['tournaments']) for e in leaderboard['entries']] == [
            (1, 'Bob', 50, 2), (2, 'Cal', 50, 2), (3, 'Ann', 50, 1), (4, 'Eve', 50, 1),
        ]
        # Fourth place earns nothing and never appears
        assert dee['id'] not in [e['player']['id'] for e in leaderboard['entries']]


class TestCleanup:
    async def test_deleting_tournament_removes_registrations(self, client, setup):
        tournament_id = setup['tournament']['id']

        assert (await client.delete(f'/api/tournaments/{tournament_id}')).status_code == 204

        assert (await client.get(f'/api/tournaments/{tournament_id}')).status_code == 404
        registrations = (await client.get(f"/api/players/{setup['players'][0]['id']}/registrations")).json()
        assert registrations == []

    async def test_deleting_club_cascades(self, client, setup):
        club_id = setup['club']['id']

        assert (await client.delete(f'/api/clubs/{club_id}')).status_code == 204

        assert (await client.get(f"/api/tournaments/{setup['tournament']['id']}")).status_code == 404
        assert (await client.get(f"/api/seasons/{setup['season']['id']}")).status_code == 404
        assert (await client.get(f"/api/points-systems/{setup['system']['id']}")).status_code == 404
        # Players belong to no club and survive
        assert len((await client.get('/api/players')).json()) == 6

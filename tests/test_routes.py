from conftest import LEGACY_LISTING_PATH, OWNED_GAMES_PATH, PORTS_JSON_PATH
from portcheck import create_app


def test_index_lists_every_platform(client):
    response = client.get('/')
    page = response.get_data(as_text=True)

    assert response.status_code == 200
    for field in ('steamid', 'epicgames', 'goggames'):
        assert f'name="{field}"' in page
    assert 'Steam lookups are not configured' not in page


def test_compare_epic_form(client):
    response = client.post('/compare/epic', data={'epicgames': "Celeste\nHollow Knight\nUntitled Goose Game\n"})
    page = response.get_data(as_text=True)

    assert response.status_code == 200
    assert 'Your Portmaster Compatible Epic Games Library' in page
    assert 'Games Games' not in page
    assert 'Help Madeline survive her inner demons.' in page
    assert 'https://portmaster.games/detail.html?name=hollow_knight' in page
    assert 'Untitled Goose Game' not in page


def test_compare_gog_without_matches(client):
    response = client.post('/compare/gog', data={'goggames': "Untitled Goose Game"})

    assert response.status_code == 200
    assert 'No Direct Matches Found' in response.get_data(as_text=True)


def test_compare_steam_form(client, upstream):
    response = client.post('/compare/steam', data={'steamid': "https://steamcommunity.com/id/gaben/"})
    page = response.get_data(as_text=True)

    assert response.status_code == 200
    assert 'https://store.steampowered.com/app/504230' in page
    assert 'Playtime: 3 hours' in page
    assert len(upstream.calls(OWNED_GAMES_PATH)) == 1


def test_compare_empty_input_shows_error_page(client, upstream):
    response = client.post('/compare/epic', data={'epicgames': "   "})

    assert response.status_code == 200
    assert 'Please provide your Epic Games list.' in response.get_data(as_text=True)
    assert upstream.requests == []


def test_compare_private_steam_profile(client, upstream):
    upstream.set(OWNED_GAMES_PATH, 200, {"response": {}})

    response = client.post('/compare/steam', data={'steamid': "76561197960287930"})

    assert 'Steam profile is private or does not exist.' in response.get_data(as_text=True)


def test_compare_catalog_unavailable(client, upstream):
    upstream.set(PORTS_JSON_PATH, 500)
    upstream.set(LEGACY_LISTING_PATH, 500)

    response = client.post('/compare/gog', data={'goggames': "Celeste"})

    assert 'Unable to fetch Portmaster games list.' in response.get_data(as_text=True)


def test_compare_unknown_platform_page(client):
    response = client.post('/compare/itch', data={})

    assert response.status_code == 400
    assert 'Unsupported platform: itch' in response.get_data(as_text=True)


def test_steam_without_api_key(upstream):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'WTF_CSRF_ENABLED': False,
        'STEAM_API_KEY': '',
        'HTTP_TRANSPORT': upstream.transport,
    })
    client = app.test_client()

    assert 'Steam lookups are not configured' in client.get('/').get_data(as_text=True)

    response = client.post('/compare/steam', data={'steamid': "76561197960287930"})
    assert 'Steam API key not configured.' in response.get_data(as_text=True)
    assert upstream.requests == []


def test_form_posts_require_csrf_token(upstream):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'STEAM_API_KEY': 'test-steam-key',
        'HTTP_TRANSPORT': upstream.transport,
    })

    response = app.test_client().post('/compare/epic', data={'epicgames': "Celeste"})

    assert response.status_code == 400
    assert upstream.requests == []


def test_api_compare(client):
    response = client.post('/api/compare', json={'platform': 'GOG', 'library_input': "Celeste\nStardew Valley"})
    body = response.get_json()

    assert response.status_code == 200
    assert body['success'] is True
    assert body['platform'] == 'gog'
    assert body['library_count'] == 2
    assert body['catalog_count'] == 3
    assert [(m['libraryName'], m['kind']) for m in body['matches']] == [
        ("Celeste", "exact"),
        ("Stardew Valley", "exact"),
    ]


def test_api_compare_invalid_platform(client):
    response = client.post('/api/compare', json={'platform': 'itch', 'library_input': "Celeste"})
    body = response.get_json()

    assert response.status_code == 400
    assert body['success'] is False
    assert body['error']['code'] == 'VALIDATION_ERROR'


def test_api_compare_empty_library(client):
    response = client.post('/api/compare', json={'platform': 'epic', 'library_input': "Available games:"})
    body = response.get_json()

    assert response.status_code == 400
    assert body['error']['code'] == 'EMPTY_LIBRARY'


def test_api_compare_rate_limited(client, upstream):
    upstream.set(PORTS_JSON_PATH, 403, {"message": "API rate limit exceeded"})

    response = client.post('/api/compare', json={'platform': 'epic', 'library_input': "Celeste"})

    assert response.status_code == 429
    assert response.get_json()['error']['code'] == 'CATALOG_RATE_LIMITED'


def test_api_catalog(client, upstream):
    response = client.get('/api/catalog')
    body = response.get_json()

    assert response.status_code == 200
    assert body['count'] == 3
    celeste = next(game for game in body['games'] if game['key'] == 'celeste')
    assert celeste['imageRef']['screenshot'] == 'screenshot.png'
    assert celeste['genres'] == ['platformer']

    client.get('/api/catalog')
    assert len(upstream.calls(PORTS_JSON_PATH)) == 1


def test_api_not_found_is_json(client):
    response = client.get('/api/nothing-here')

    assert response.status_code == 404
    assert response.get_json()['error']['code'] == 'NOT_FOUND'


def test_page_not_found_is_html(client):
    response = client.get('/nothing-here')

    assert response.status_code == 404
    assert response.mimetype == 'text/html'

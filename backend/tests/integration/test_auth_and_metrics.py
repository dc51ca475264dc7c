def test_obtain_token_and_use_it(client):
    # Obtain token (auto-registers user)
    r = client.post('/auth/token', data={'username': 'user1@example.com', 'password': 'pass123'}, headers={'Content-Type': 'application/x-www-form-urlencoded'})
    assert r.status_code == 200, r.text
    token = r.json()['access_token']

    me = client.get('/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert me.status_code == 200
    assert me.json()['email'] == 'user1@example.com'
    assert me.json()['familyGroup'] == 'real'


def test_wrong_password_rejected(client):
    client.post('/auth/token', data={'username': 'user1@example.com', 'password': 'pass123'})
    r = client.post('/auth/token', data={'username': 'user1@example.com', 'password': 'nope'})
    assert r.status_code == 401


def test_without_token_acts_as_demo_user(client):
    r = client.get('/auth/me')
    assert r.status_code == 200
    assert r.json()['id'] == 'demo-user'
    assert r.json()['familyGroup'] == 'demo'


def test_bad_token_falls_back_to_demo_user(client):
    r = client.get('/auth/me', headers={'Authorization': 'Bearer not-a-jwt'})
    assert r.json()['familyGroup'] == 'demo'


def test_healthz(client):
    r = client.get('/healthz')
    assert r.status_code == 200
    assert r.json()['status'] == 'ok'
    assert r.json()['eventCacheBackend'] == 'memory'


def test_metrics_endpoint_exposes_prometheus_after_requests(client):
    assert client.get('/events/calendar').status_code == 200
    assert client.get('/events/some-id').status_code == 404
    m = client.get('/metrics')
    assert m.status_code == 200
    body = m.text
    assert 'familyhub_requests_total' in body
    assert 'familyhub_calendar_load_total' in body
    assert 'path="/events/calendar"' in body
    assert 'path="/events/:id"' in body

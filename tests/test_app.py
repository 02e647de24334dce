from unittest import mock

from models import Site
from prober import Outcome


def test_add_site_form(client):
    response = client.post('/', data={
        'url': 'https://example.com',
        'interval': 10,
        'threshold': 2,
        'command': 'heroku restart -a myapp',
    })

    assert response.status_code == 302
    assert response.headers['Location'].endswith('/dashboard')
    site = Site.query.one()
    assert (site.url, site.interval, site.threshold, site.command) == (
        'https://example.com', 10, 2, 'heroku restart -a myapp')


def test_add_form_rejects_url_without_scheme(client):
    response = client.post('/', data={'url': 'example.com', 'interval': 5, 'threshold': 3})
    assert response.status_code == 400
    assert Site.query.count() == 0


def test_add_form_rejects_non_http_scheme(client):
    response = client.post('/', data={'url': 'ftp://example.com', 'interval': 5, 'threshold': 3})
    assert response.status_code == 400
    assert b'http:// or https://' in response.data
    assert Site.query.count() == 0


def test_add_form_shows_defaults(client):
    response = client.get('/')
    assert response.status_code == 200
    assert b'value="5"' in response.data
    assert b'value="3"' in response.data


def test_dashboard_lists_sites(client, store):
    store.add('https://a.example', command='restart')
    response = client.get('/dashboard')
    assert response.status_code == 200
    assert b'https://a.example' in response.data
    assert b'healthy' in response.data


def test_remove_site(client, store):
    site = store.add('https://a.example')
    response = client.get(f'/action/{site.id}/remove')
    assert response.status_code == 302
    assert Site.query.count() == 0
    assert client.get(f'/action/{site.id}/remove').status_code == 404


def test_api_sites_and_stats(app, client, store):
    store.add('https://a.example', threshold=1)
    store.add('https://b.example')
    monitor = app.extensions['uptime_monitor']
    monitor.prober = lambda url: Outcome.DOWN if url == 'https://a.example' else Outcome.UP
    monitor.tick()

    sites = client.get('/api/sites').get_json()
    assert [s['url'] for s in sites] == ['https://a.example', 'https://b.example']
    assert sites[0]['state'] == 'action_fired'
    assert sites[0]['command_executed'] is True
    assert sites[1]['state'] == 'healthy'

    stats = client.get('/api/stats').get_json()
    assert stats == {'total': 2, 'failing': 1, 'fired': 1, 'monitoring': False}


def test_monitor_start_and_stop_routes(app, client):
    monitor = app.extensions['uptime_monitor']
    monitor.tick_seconds = 60
    monitor.tick = mock.Mock(return_value=[])

    assert client.get('/monitor/start').status_code == 302
    assert monitor.running
    assert client.get('/api/stats').get_json()['monitoring'] is True

    assert client.get('/monitor/stop').status_code == 302
    assert not monitor.running
    assert client.get('/monitor/restart').status_code == 404

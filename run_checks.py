from fastapi.testclient import TestClient
from reliefhub.main import app

client = TestClient(app)

print('ROOT:')
print(client.get('/').json())

print('\nHEALTH:')
print(client.get('/health').json())

print('\nREGISTER USER:')
print(client.post('/session/users', json={
    'id': 'demo-victim',
    'display_name': 'Demo Victim',
    'email': 'victim@example.com',
    'role': 'victim',
    'location': {'latitude': 22.7196, 'longitude': 75.8577},
}).json())

print('\nADD RELIEF POINT:')
print(client.post('/relief-points', json={
    'title': 'Community Kitchen',
    'category': 'food',
    'location': {'latitude': 22.7186, 'longitude': 75.8553},
    'location_label': 'Rajwada, Indore',
}).json())

print('\nRECOMMENDATIONS:')
resp = client.post('/recommendations/generate', headers={'X-User-ID': 'demo-victim'})
print(resp.status_code)
for rec in resp.json():
    print(f"  [{rec['priority']}] {rec['title']} ({rec['confidence']:.2f})")

print('\nUNREAD NOTIFICATIONS:')
print(client.get('/notifications/unread-count').json())

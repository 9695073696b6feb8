import unittest
from datetime import timedelta
from roomportal import create_app
from roomportal.extensions import db
from roomportal.models import User
from roomportal.config import TestingConfig
from roomportal.utils.dates import utcnow


class TestOtpLogin(unittest.TestCase):
    def setUp(self):
        self.app = create_app(config_class=TestingConfig)
        self.sent = []
        self.app.config['OTP_SENDER'] = lambda user, code: self.sent.append((user.id, code))
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()
        db.create_all()

        self.user = User(name='Priya', email='priya@example.com', phone_number='9876543210')
        db.session.add(self.user)
        db.session.commit()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def request_code(self):
        res = self.client.post('/api/auth/send-otp', json={'email': 'Priya@Example.com', 'phone': '98765 43210'})
        self.assertEqual(res.status_code, 200)
        return self.sent[-1][1]

    def test_send_and_verify(self):
        code = self.request_code()
        self.assertEqual(len(code), 6)
        self.assertTrue(code.isdigit())
        # Only the hash is stored
        self.assertNotEqual(db.session.get(User, self.user.id).otp_hash, code)

        res = self.client.post('/api/auth/verify-otp', json={'phone': '9876543210', 'otp': code})
        self.assertEqual(res.status_code, 200)
        body = res.get_json()
        self.assertTrue(body['verified'])
        self.assertEqual(body['user']['email'], 'priya@example.com')

        me = self.client.get('/api/auth/me', headers={'Authorization': f"Bearer {body['token']}"})
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.get_json()['id'], self.user.id)

        stored = db.session.get(User, self.user.id)
        self.assertTrue(stored.is_verified)
        self.assertIsNone(stored.otp_hash)

    def test_code_is_single_use(self):
        code = self.request_code()
        self.client.post('/api/auth/verify-otp', json={'phone': '9876543210', 'otp': code})
        res = self.client.post('/api/auth/verify-otp', json={'phone': '9876543210', 'otp': code})
        self.assertEqual(res.status_code, 401)

    def test_wrong_code(self):
        code = self.request_code()
        wrong = '000000' if code != '000000' else '111111'
        res = self.client.post('/api/auth/verify-otp', json={'phone': '9876543210', 'otp': wrong})
        self.assertEqual(res.status_code, 401)

    def test_expired_code(self):
        code = self.request_code()
        user = db.session.get(User, self.user.id)
        user.otp_expiry = utcnow() - timedelta(minutes=1)
        db.session.commit()

        res = self.client.post('/api/auth/verify-otp', json={'phone': '9876543210', 'otp': code})
        self.assertEqual(res.status_code, 401)

    def test_unknown_user(self):
        res = self.client.post('/api/auth/send-otp', json={'email': 'nobody@example.com', 'phone': '1'})
        self.assertEqual(res.status_code, 404)
        self.assertEqual(self.sent, [])

    def test_missing_fields(self):
        res = self.client.post('/api/auth/send-otp', json={'email': 'priya@example.com'})
        self.assertEqual(res.status_code, 400)

    def test_bad_token(self):
        res = self.client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-token'})
        self.assertEqual(res.status_code, 401)


if __name__ == '__main__':
    unittest.main()

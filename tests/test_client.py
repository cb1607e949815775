"""
Unit tests for the client wrapper and its configuration.
"""

import os
import unittest
from unittest.mock import Mock, patch

import requests

from mws_signing.client import MwsHttpClient
from mws_signing.config import ClientConfig
from mws_signing.errors import InvalidEndpointError, UnsignedRequestError
from mws_signing.signer import FixedClock, verify_signature


class TestMwsHttpClient(unittest.TestCase):
    """Test the sign-then-send flow of MwsHttpClient."""

    def setUp(self):
        self.session = Mock(spec=requests.Session)
        response = Mock(spec=requests.Response)
        response.content = b"<GetServiceStatusResponse/>"
        response.status_code = 200
        self.session.post.return_value = response

        self.client = MwsHttpClient(
            host="example.com",
            path="/Op",
            secret_key="secret",
            parameters={"Action": "Test"},
            clock=FixedClock("2021-01-01T00:00:00Z"),
            session=self.session,
        )

    def test_endpoint(self):
        self.assertEqual(self.client.endpoint(), "https://example.com/Op")

    def test_invalid_endpoint_rejected_at_construction(self):
        with self.assertRaises(InvalidEndpointError):
            MwsHttpClient(host="example.com", path="Op", secret_key="secret")

    def test_request_before_signing_fails(self):
        with self.assertRaises(UnsignedRequestError):
            self.client.request()

        self.session.post.assert_not_called()

    def test_sign_query_reference_signature(self):
        self.client.sign_query()

        self.assertTrue(self.client.signed)
        self.assertEqual(self.client.parameters.get("Signature"), "DzWPQzx88BjDD3N3I0PwhfgWq/8fmMzikDD91qAWkGI=")

    def test_sign_and_request(self):
        self.client.sign_query()

        self.assertEqual(self.client.request(), b"<GetServiceStatusResponse/>")
        self.session.post.assert_called_once()

    def test_augment_parameters_requires_resign(self):
        self.client.sign_query()
        self.client.augment_parameters({"SellerId": "A1B2C3"})

        self.assertFalse(self.client.signed)
        with self.assertRaises(UnsignedRequestError):
            self.client.request()

        self.client.sign_query()
        self.client.request()

        sent = self.session.post.call_args[1]["data"].decode("utf-8")
        self.assertIn("SellerId=A1B2C3", sent)
        is_valid, error = verify_signature(self.client.parameters, self.client.context)
        self.assertTrue(is_valid, error)

    def test_context_manager_closes_session(self):
        with self.client as client:
            client.sign_query()

        self.session.close.assert_called_once_with()

    def test_from_config(self):
        config = ClientConfig(secret_key="secret", host="mws-eu.amazonservices.com", timeout=12)

        client = MwsHttpClient.from_config(config, "/Orders/2013-09-01", session=self.session)

        self.assertEqual(client.endpoint(), "https://mws-eu.amazonservices.com/Orders/2013-09-01")
        self.assertEqual(client.dispatcher.timeout, 12)


class TestClientConfig(unittest.TestCase):
    """Test ClientConfig.from_env."""

    def test_from_env(self):
        env = {"MWS_SECRET_KEY": "secret", "MWS_HOST": "mws.amazonservices.jp", "MWS_TIMEOUT": "7.5"}
        with patch.dict(os.environ, env, clear=True):
            config = ClientConfig.from_env()

        self.assertEqual(config.secret_key, "secret")
        self.assertEqual(config.host, "mws.amazonservices.jp")
        self.assertEqual(config.timeout, 7.5)

    def test_defaults(self):
        with patch.dict(os.environ, {"MWS_SECRET_KEY": "secret"}, clear=True):
            config = ClientConfig.from_env()

        self.assertEqual(config.host, "mws.amazonservices.com")
        self.assertEqual(config.timeout, 30.0)

    def test_missing_secret(self):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(RuntimeError):
                ClientConfig.from_env()

    def test_invalid_timeout(self):
        with patch.dict(os.environ, {"MWS_SECRET_KEY": "secret", "MWS_TIMEOUT": "soon"}, clear=True):
            with self.assertRaises(RuntimeError):
                ClientConfig.from_env()

    def test_repr_hides_secret(self):
        self.assertNotIn("top-secret", repr(ClientConfig(secret_key="top-secret")))


if __name__ == "__main__":
    unittest.main()

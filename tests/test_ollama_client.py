import unittest

import requests

from astrosyo.ollama_client import OllamaClient


class DummyResponse:
    def __init__(self, status_code=200, content="ok", json_ok=True):
        self.status_code = status_code
        self._content = content
        self._json_ok = json_ok
        self.text = content
        # mimic requests.Response.elapsed
        self.elapsed = type("Elapsed", (), {"total_seconds": lambda self: 0.123})()

    def json(self):
        if not self._json_ok:
            raise ValueError("not json")
        return {"message": {"content": self._content}}


class TestOllamaClient(unittest.TestCase):
    def setUp(self):
        from astrosyo import ollama_client as oc
        self._orig_post = oc.requests.post

    def tearDown(self):
        from astrosyo import ollama_client as oc
        oc.requests.post = self._orig_post

    def _client(self):
        client = OllamaClient()
        client.retry_backoff_sec = 0
        return client

    def test_chat_success(self):
        captured = {}

        def fake_post(url, json=None, timeout=None):
            captured["url"] = url
            captured["payload"] = json
            return DummyResponse(200, "hi")

        from astrosyo import ollama_client as oc

        oc.requests.post = fake_post
        out = self._client().chat([{"role": "user", "content": "hi"}])
        self.assertEqual(out, "hi")
        self.assertTrue(captured["url"].endswith("/api/chat"))
        self.assertFalse(captured["payload"]["stream"])

    def test_chat_non_200(self):
        def fake_post(url, json=None, timeout=None):
            return DummyResponse(500, "err")

        from astrosyo import ollama_client as oc

        oc.requests.post = fake_post
        with self.assertRaises(RuntimeError):
            self._client().chat([])

    def test_chat_retries_on_eof(self):
        responses = [DummyResponse(500, "unexpected EOF"), DummyResponse(200, "second try")]

        def fake_post(url, json=None, timeout=None):
            return responses.pop(0)

        from astrosyo import ollama_client as oc

        oc.requests.post = fake_post
        client = self._client()
        client.max_retries = 1
        self.assertEqual(client.chat([]), "second try")

    def test_chat_connection_error_raised_after_retries(self):
        calls = {"n": 0}

        def fake_post(url, json=None, timeout=None):
            calls["n"] += 1
            raise requests.exceptions.ConnectionError("refused")

        from astrosyo import ollama_client as oc

        oc.requests.post = fake_post
        client = self._client()
        client.max_retries = 2
        with self.assertRaises(requests.exceptions.ConnectionError):
            client.chat([])
        self.assertEqual(calls["n"], 3)

    def test_retry_policy_from_settings(self):
        from astrosyo.config import Settings

        cfg = Settings(
            ollama_base_url="http://ollama.local:11434/",
            ollama_timeout_sec=5,
            ollama_retries=3,
            ollama_retry_backoff_sec=0,
        )
        client = OllamaClient(config=cfg)
        self.assertEqual(client.url, "http://ollama.local:11434/api/chat")
        self.assertEqual(client.timeout_sec, 5)
        self.assertEqual(client.max_retries, 3)

        overridden = OllamaClient(config=cfg, timeout_sec=1.5, max_retries=0)
        self.assertEqual(overridden.timeout_sec, 1.5)
        self.assertEqual(overridden.max_retries, 0)

    def test_eof_on_last_attempt_raises(self):
        from astrosyo import ollama_client as oc

        oc.requests.post = lambda url, json=None, timeout=None: DummyResponse(500, "EOF")
        client = self._client()
        client.max_retries = 0
        with self.assertRaises(RuntimeError):
            client.chat([])

    def test_chat_non_json(self):
        from astrosyo import ollama_client as oc

        oc.requests.post = lambda url, json=None, timeout=None: DummyResponse(200, "<html>", json_ok=False)
        with self.assertRaises(RuntimeError):
            self._client().chat([])


if __name__ == "__main__":
    unittest.main()

import threading
import unittest

import requests

from gmail.errors import AuthFlowError
from gmail.oauth_callback import CallbackListener

HOST = "127.0.0.1"


class _Browser:
    """Sends GET requests to the listener from a background thread."""

    def __init__(self, port, paths):
        self.url = f"http://{HOST}:{port}"
        self.paths = paths
        self.responses = []
        self.thread = threading.Thread(target=self._run, daemon=True)

    def _run(self):
        session = requests.Session()
        session.trust_env = False
        for path in self.paths:
            self.responses.append(session.get(self.url + path, timeout=5))

    def __enter__(self):
        self.thread.start()
        return self

    def __exit__(self, *exc_info):
        self.thread.join(timeout=5)


class CallbackListenerTests(unittest.TestCase):
    def test_receives_code_and_answers_success_page(self):
        with CallbackListener(host=HOST, port=0, timeout=5) as listener:
            with _Browser(listener.port, ["/?code=4%2Fabc&scope=x"]) as browser:
                code = listener.wait_for_code()
        self.assertEqual(code, "4/abc")
        self.assertEqual(browser.responses[0].status_code, 200)
        self.assertIn("Authentication successful", browser.responses[0].text)

    def test_other_paths_get_404_and_keep_waiting(self):
        with CallbackListener(host=HOST, port=0, timeout=5) as listener:
            with _Browser(listener.port, ["/favicon.ico", "/?code=xyz"]) as browser:
                code = listener.wait_for_code()
        self.assertEqual(code, "xyz")
        self.assertEqual([r.status_code for r in browser.responses], [404, 200])

    def test_missing_code_fails(self):
        with CallbackListener(host=HOST, port=0, timeout=5) as listener:
            with _Browser(listener.port, ["/?error=access_denied"]) as browser:
                with self.assertRaises(AuthFlowError) as ctx:
                    listener.wait_for_code()
        self.assertIn("access_denied", ctx.exception.message)
        self.assertEqual(browser.responses[0].status_code, 400)

    def test_request_without_query_fails(self):
        with CallbackListener(host=HOST, port=0, timeout=5) as listener:
            with _Browser(listener.port, ["/"]):
                with self.assertRaises(AuthFlowError) as ctx:
                    listener.wait_for_code()
        self.assertIn("No code received", ctx.exception.message)

    def test_timeout(self):
        with CallbackListener(host=HOST, port=0, timeout=0.2) as listener:
            with self.assertRaises(AuthFlowError) as ctx:
                listener.wait_for_code()
        self.assertIn("Timed out", ctx.exception.message)

    def test_socket_released_on_exit(self):
        listener = CallbackListener(host=HOST, port=0, timeout=0.1)
        with listener:
            port = listener.port
        # Rebinding the same port only works once the first listener closed it
        with CallbackListener(host=HOST, port=port, timeout=0.1) as again:
            self.assertEqual(again.port, port)

    def test_port_in_use_raises_auth_flow_error(self):
        with CallbackListener(host=HOST, port=0) as first:
            with self.assertRaises(AuthFlowError):
                with CallbackListener(host=HOST, port=first.port):
                    pass


if __name__ == "__main__":
    unittest.main()

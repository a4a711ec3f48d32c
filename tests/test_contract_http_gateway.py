import io
import json
import unittest
from typing import Any, List
from unittest.mock import patch
from urllib import error

from shopboard.errors import TransportError
from shopboard.sync import HttpSyncGateway

URL = "https://example.invalid/exec"


class _Resp(io.BytesIO):
    def __enter__(self) -> "_Resp":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def _json_resp(obj: Any) -> _Resp:
    return _Resp(json.dumps(obj).encode("utf-8"))


class TestHttpGatewayContract(unittest.TestCase):
    def test_read_bare_order_list(self) -> None:
        seen: List[Any] = []

        def fake_urlopen(req, timeout):  # type: ignore[no-untyped-def]
            seen.append((req.full_url, req.get_method(), timeout))
            return _json_resp({"status": "success", "data": [{"id": "1"}]})

        with patch("shopboard.sync.request.urlopen", side_effect=fake_urlopen):
            snap = HttpSyncGateway(URL, timeout_s=3).read()
        self.assertEqual(snap.orders, [{"id": "1"}])
        self.assertIsNone(snap.resources)
        self.assertEqual(seen, [(URL + "?action=read", "GET", 3.0)])

    def test_read_document_with_resources(self) -> None:
        body = {"status": "success", "data": {"orders": [], "resources": ["A"]}}
        with patch("shopboard.sync.request.urlopen", return_value=_json_resp(body)):
            snap = HttpSyncGateway(URL + "?key=1").read()
        self.assertEqual(snap.resources, ["A"])

    def test_save_posts_text_plain_json(self) -> None:
        seen: List[Any] = []

        def fake_urlopen(req, timeout):  # type: ignore[no-untyped-def]
            seen.append(req)
            return _json_resp({"status": "success"})

        with patch("shopboard.sync.request.urlopen", side_effect=fake_urlopen):
            HttpSyncGateway(URL).save([{"id": "1"}], ["A"])
            HttpSyncGateway(URL, orders_only=True).save([{"id": "1"}], ["A"])

        self.assertEqual(seen[0].full_url, URL + "?action=save")
        self.assertEqual(seen[0].get_method(), "POST")
        self.assertEqual(seen[0].get_header("Content-type"), "text/plain;charset=utf-8")
        self.assertEqual(json.loads(seen[0].data), {"orders": [{"id": "1"}], "resources": ["A"]})
        self.assertEqual(json.loads(seen[1].data), [{"id": "1"}])

    def test_server_error_status(self) -> None:
        body = {"status": "error", "message": "sheet locked"}
        with patch("shopboard.sync.request.urlopen", return_value=_json_resp(body)):
            with self.assertRaises(TransportError) as ctx:
                HttpSyncGateway(URL).save([], [])
        self.assertIn("sheet locked", str(ctx.exception))

    def test_http_and_connection_errors(self) -> None:
        http_err = error.HTTPError(URL, 502, "Bad Gateway", {}, io.BytesIO(b""))  # type: ignore[arg-type]
        with patch("shopboard.sync.request.urlopen", side_effect=http_err):
            with self.assertRaises(TransportError) as ctx:
                HttpSyncGateway(URL).read()
        self.assertIn("HTTP 502", str(ctx.exception))

        with patch("shopboard.sync.request.urlopen", side_effect=error.URLError("no route")):
            with self.assertRaises(TransportError):
                HttpSyncGateway(URL).read()

    def test_non_json_response(self) -> None:
        with patch("shopboard.sync.request.urlopen", return_value=_Resp(b"<html>")):
            with self.assertRaises(TransportError):
                HttpSyncGateway(URL).read()

    def test_timeout_from_env(self) -> None:
        with patch.dict("os.environ", {"SHOPBOARD_HTTP_TIMEOUT_S": "7.5"}):
            self.assertEqual(HttpSyncGateway(URL).timeout_s, 7.5)
        with patch.dict("os.environ", {"SHOPBOARD_HTTP_TIMEOUT_S": "junk"}):
            self.assertEqual(HttpSyncGateway(URL).timeout_s, 30.0)


if __name__ == "__main__":
    unittest.main(verbosity=2)

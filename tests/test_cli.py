import json
import unittest
from unittest import mock

from fakes import URL, FakeTransport, make_response

from relaykit.http.cli import create_parser, main
from relaykit.http.cli.call import _parse_headers, _parse_query
from relaykit.http.methods import Get, Post

NO_CONFIG = ["--config-file-path", "/nonexistent/config.json"]


class CliParserTest(unittest.TestCase):
    def test_call_defaults(self):
        args = create_parser().parse_args(["call", URL])
        self.assertEqual(args.urls, [URL])
        self.assertEqual(args.method, "GET")
        self.assertIsNone(args.data)
        self.assertIsNone(args.timeout)
        self.assertIsNone(args.max_concurrent)
        self.assertFalse(args.log_failures)
        self.assertEqual(args.output_format, "json")

    def test_method_is_case_insensitive(self):
        args = create_parser().parse_args(["call", URL, "-X", "post"])
        self.assertEqual(args.method, "POST")

    def test_unsupported_method_rejected(self):
        with mock.patch("sys.stderr"):
            with self.assertRaises(SystemExit):
                create_parser().parse_args(["call", URL, "-X", "PATCH"])

    def test_repeatable_options(self):
        args = create_parser().parse_args(
            ["call", URL, f"{URL}/2", "-H", "A: 1", "-H", "B: 2", "-q", "x=1", "-q", "y=2", "--max-concurrent", "2"]
        )
        self.assertEqual(args.urls, [URL, f"{URL}/2"])
        self.assertEqual(args.headers, ["A: 1", "B: 2"])
        self.assertEqual(args.query, ["x=1", "y=2"])
        self.assertEqual(args.max_concurrent, 2)

    def test_only_json_formats_offered(self):
        with mock.patch("sys.stderr"):
            with self.assertRaises(SystemExit):
                create_parser().parse_args(["call", URL, "--format", "csv"])

    def test_no_command_shows_help(self):
        with mock.patch("builtins.print"):
            result = main([])
        self.assertEqual(result, 0)


class CliHelpersTest(unittest.TestCase):
    def test_parse_headers(self):
        self.assertEqual(_parse_headers(["Accept: text/plain", "X-Id: a: b"]), {"Accept": "text/plain", "X-Id": "a: b"})
        self.assertIsNone(_parse_headers(None))
        with self.assertRaises(ValueError):
            _parse_headers(["NoColon"])

    def test_parse_query_keeps_order(self):
        self.assertEqual(_parse_query(["b=2", "a=1=1"]), [("b", "2"), ("a", "1=1")])
        with self.assertRaises(ValueError):
            _parse_query(["novalue"])


class CliCallTest(unittest.TestCase):
    def _run(self, args, transport):
        with mock.patch("relaykit.http.manager.make_transport", return_value=transport) as mock_make:
            with mock.patch("builtins.print") as mock_print:
                result = main(["call", *args, *NO_CONFIG])
        return result, mock_print, mock_make

    def test_get_prints_json(self):
        transport = FakeTransport(make_response(body=b'{"a": 1}'))
        result, mock_print, mock_make = self._run([URL, "-q", "page=2"], transport)

        self.assertEqual(result, 0)
        mock_print.assert_called_once_with(json.dumps({"a": 1}, indent=2))
        self.assertEqual(transport.requests[0].url, f"{URL}?page=2")
        self.assertEqual(transport.requests[0].method, Get.name)
        mock_make.assert_called_once_with("requests", max_concurrent=5, client_name="RequestManager")

    def test_post_sends_json_body(self):
        transport = FakeTransport(make_response(body=b"created"))
        result, mock_print, _ = self._run([URL, "-X", "POST", "-d", '{"name": "x"}'], transport)

        self.assertEqual(result, 0)
        request = transport.requests[0]
        self.assertEqual(request.method, Post.name)
        self.assertEqual(json.loads(request.body), {"name": "x"})
        self.assertEqual(request.headers["Content-Type"], "application/json")
        mock_print.assert_called_once_with("created")

    def test_jsonl_output(self):
        transport = FakeTransport(make_response(body=b'[{"a": 1}, {"a": 2}]'))
        _, mock_print, _ = self._run([URL, "--format", "jsonl"], transport)
        self.assertEqual(mock_print.call_args_list, [mock.call('{"a": 1}'), mock.call('{"a": 2}')])

    def test_jsonl_prints_non_array_as_json(self):
        transport = FakeTransport(make_response(body=b'{"a": 1}'))
        _, mock_print, _ = self._run([URL, "--format", "jsonl"], transport)
        mock_print.assert_called_once_with(json.dumps({"a": 1}, indent=2))

    def test_json_response_rejected_by_default_mime_type(self):
        transport = FakeTransport(make_response(body=b'{"a": 1}', mime_type="application/json"))
        result, mock_print, _ = self._run([URL], transport)
        self.assertEqual(result, 1)
        self.assertIn("application/json", mock_print.call_args[0][0])

    def test_other_expected_mime_type_accepts_json(self):
        transport = FakeTransport(make_response(body=b'{"a": 1}', mime_type="application/json"))
        result, mock_print, _ = self._run([URL, "--expected-mime-type", "text/html"], transport)
        self.assertEqual(result, 0)
        mock_print.assert_called_once_with(json.dumps({"a": 1}, indent=2))

    def test_failure_returns_1(self):
        transport = FakeTransport(make_response(status_code=500))
        result, mock_print, _ = self._run([URL], transport)
        self.assertEqual(result, 1)
        self.assertIn("Unexpected status code 500", mock_print.call_args[0][0])

    def test_short_url_rejected(self):
        transport = FakeTransport()
        result, mock_print, _ = self._run(["https://h/a"], transport)
        self.assertEqual(result, 1)
        self.assertEqual(transport.requests, [])
        self.assertIn("Error: https://h/a", mock_print.call_args[0][0])

    def test_several_urls_in_submission_order(self):
        def respond(request):
            return make_response(body=json.dumps({"url": request.url}).encode())

        transport = FakeTransport(respond)
        urls = [f"{URL}/{i}" for i in range(3)]
        result, mock_print, mock_make = self._run([*urls, "--max-concurrent", "2", "--transport", "httpx"], transport)

        self.assertEqual(result, 0)
        headers = [c[0][0] for c in mock_print.call_args_list if c[0][0].startswith("==>")]
        self.assertEqual(headers, [f"==> {url} <==" for url in urls])
        mock_make.assert_called_once_with("httpx", max_concurrent=2, client_name="RequestManager")

    def test_invalid_data_returns_1(self):
        result, mock_print, _ = self._run([URL, "-X", "POST", "-d", "{oops"], FakeTransport())
        self.assertEqual(result, 1)
        self.assertIn("Invalid JSON data", mock_print.call_args[0][0])


if __name__ == "__main__":
    unittest.main()

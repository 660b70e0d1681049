"""Unit tests for HTTP method variants."""

import unittest

from relaykit.http.methods import Delete, Get, Head, Post, Put, method_from_name


class TestHttpMethodNames(unittest.TestCase):
    def test_wire_names(self):
        self.assertEqual(Get().name, "GET")
        self.assertEqual(Put().name, "PUT")
        self.assertEqual(Post().name, "POST")
        self.assertEqual(Delete().name, "DELETE")
        self.assertEqual(Head().name, "HEAD")

    def test_get_keeps_query_item_order(self):
        method = Get([("b", "2"), ("a", "1"), ("b", "3")])
        self.assertEqual(method.query_items, (("b", "2"), ("a", "1"), ("b", "3")))


class TestHttpMethodEquality(unittest.TestCase):
    def test_equal_when_names_match_regardless_of_payload(self):
        self.assertEqual(Post({"a": 1}), Post({"b": 2}))
        self.assertEqual(Put(None), Put([1, 2, 3]))

    def test_equal_when_names_match_regardless_of_query_items(self):
        self.assertEqual(Get([("q", "x")]), Get())

    def test_different_names_are_not_equal(self):
        self.assertNotEqual(Put({"a": 1}), Post({"a": 1}))
        self.assertNotEqual(Delete(), Head())

    def test_not_equal_to_plain_strings(self):
        self.assertNotEqual(Get(), "GET")

    def test_hash_follows_name(self):
        self.assertEqual(len({Post({"a": 1}), Post({"b": 2}), Get()}), 2)


class TestMethodFromName(unittest.TestCase):
    def test_case_insensitive(self):
        self.assertIsInstance(method_from_name("delete"), Delete)

    def test_payload_goes_to_put_and_post(self):
        self.assertEqual(method_from_name("POST", payload={"a": 1}).payload, {"a": 1})
        self.assertEqual(method_from_name("PUT", payload=[1]).payload, [1])

    def test_query_items_go_to_get(self):
        self.assertEqual(method_from_name("GET", query_items=[("q", "x")]).query_items, (("q", "x"),))

    def test_unknown_method_raises(self):
        with self.assertRaises(ValueError) as cm:
            method_from_name("PATCH")
        self.assertIn("Unsupported HTTP method", str(cm.exception))


if __name__ == "__main__":
    unittest.main()

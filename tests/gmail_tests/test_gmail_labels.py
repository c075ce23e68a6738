import unittest

from gmail.errors import LabelNotFoundError
from gmail.labels import LabelResolver
from tests.fakes.gmail import FakeGmailClient

LABELS = [
    {"id": "INBOX", "name": "INBOX", "type": "system"},
    {"id": "Label_1", "name": "Work", "type": "user"},
    {"id": "Label_2", "name": "Work", "type": "user"},
    {"id": "Label_3", "name": "Workshop", "type": "user"},
]


class LabelResolverTests(unittest.TestCase):
    def setUp(self):
        self.client = FakeGmailClient(labels=list(LABELS))
        self.getter_calls = 0

        def getter():
            self.getter_calls += 1
            return self.client

        self.resolver = LabelResolver(getter)

    def _fetches(self):
        return [c for c in self.client.calls if c[0] == "list_labels"]

    def test_construction_does_not_fetch(self):
        self.assertEqual(self.getter_calls, 0)
        self.assertEqual(self._fetches(), [])

    def test_first_exact_match_wins(self):
        self.assertEqual(self.resolver.get_label_id_by_name("Work"), "Label_1")

    def test_match_is_case_sensitive(self):
        with self.assertRaises(LabelNotFoundError):
            self.resolver.get_label_id_by_name("work")

    def test_substring_does_not_match(self):
        with self.assertRaises(LabelNotFoundError):
            self.resolver.get_label_id_by_name("Shop")

    def test_not_found_lists_known_names(self):
        with self.assertRaises(LabelNotFoundError) as ctx:
            self.resolver.get_label_id_by_name("Missing")
        self.assertEqual(ctx.exception.available, ["INBOX", "Work", "Work", "Workshop"])
        self.assertIn('Label "Missing" not found', ctx.exception.message)
        self.assertIn("Available labels: INBOX, Work, Work, Workshop", ctx.exception.message)

    def test_cache_reused_across_lookups(self):
        self.resolver.get_label_id_by_name("INBOX")
        self.resolver.get_label_id_by_name("Workshop")
        self.assertEqual(len(self._fetches()), 1)

    def test_lookup_does_not_force_refresh(self):
        self.resolver.get_labels()
        self.client.labels.append({"id": "Label_9", "name": "New", "type": "user"})
        with self.assertRaises(LabelNotFoundError):
            self.resolver.get_label_id_by_name("New")

    def test_force_refresh_replaces_cache(self):
        self.resolver.get_labels()
        self.client.labels = [{"id": "Label_9", "name": "New", "type": "user"}]
        labels = self.resolver.get_labels(force_refresh=True)
        self.assertEqual([lab["id"] for lab in labels], ["Label_9"])
        self.assertEqual(len(self._fetches()), 2)
        self.assertEqual(self.resolver.get_label_id_by_name("New"), "Label_9")
        with self.assertRaises(LabelNotFoundError):
            self.resolver.get_label_id_by_name("Work")


if __name__ == "__main__":
    unittest.main()

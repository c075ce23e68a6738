import unittest

from gmail.compose import OutgoingMessage
from gmail.errors import MissingMessageIdError
from gmail.sender import (
    ReplyRequest,
    build_reply,
    quote_text,
    reply_subject,
    reply_to_email,
    send_email,
)
from tests.fakes.gmail import FakeGmailClient
from tests.fixtures import headers, make_message, parse_raw, text_part

DRAFT_URL_PREFIX = "https://mail.google.com/mail/u/0/#drafts?compose="


def original_message(**hdrs):
    values = {
        "From": "Alice Example <alice@example.com>",
        "Subject": "Report",
        "Date": "Mon, 1 Jan 2024 10:00:00 +0000",
        "Message_ID": "<abc@x>",
    }
    values.update(hdrs)
    values = {k: v for k, v in values.items() if v is not None}
    return make_message(
        msg_id="m1",
        thread_id="t1",
        hdrs=headers(**values),
        parts=[text_part("text/plain", "a\nb"), text_part("text/html", "<p>orig</p>")],
    )


class SendEmailTests(unittest.TestCase):
    def test_send_transmits_immediately(self):
        client = FakeGmailClient()
        result = send_email(client, OutgoingMessage(to="bob@example.com", subject="Hi", body_text="yo"))
        self.assertEqual(result["id"], "SENT_1")
        encoded, thread_id = client.sent_messages[0]
        self.assertIsNone(thread_id)
        self.assertEqual(parse_raw(encoded)["To"], "bob@example.com")
        self.assertEqual(client.created_drafts, [])

    def test_draft_adds_gmail_url(self):
        client = FakeGmailClient()
        result = send_email(client, OutgoingMessage(to="bob@example.com", subject="Hi", body_text="yo"), draft=True)
        self.assertEqual(result["id"], "DRAFT_1")
        self.assertEqual(result["gmailUrl"], DRAFT_URL_PREFIX + "DRAFT_1")
        self.assertEqual(client.sent_messages, [])


class ReplyDerivationTests(unittest.TestCase):
    def test_references_start_chain(self):
        reply, thread_id = build_reply(original_message(), ReplyRequest("m1", body_text="thanks"))
        self.assertEqual(reply.headers["References"], "<abc@x>")
        self.assertEqual(reply.headers["In-Reply-To"], "<abc@x>")
        self.assertEqual(thread_id, "t1")

    def test_references_extend_existing_chain(self):
        original = original_message(References="<a@x> <b@x>")
        reply, _ = build_reply(original, ReplyRequest("m1", body_text="thanks"))
        self.assertEqual(reply.headers["References"], "<a@x> <b@x> <abc@x>")
        self.assertEqual(reply.headers["In-Reply-To"], "<abc@x>")

    def test_subject_prefix(self):
        self.assertEqual(reply_subject("Report"), "Re: Report")
        self.assertEqual(reply_subject("Re: Report"), "Re: Report")
        self.assertEqual(reply_subject("RE: Report"), "Re: RE: Report")
        self.assertEqual(reply_subject(None), "Re: ")

    def test_recipient_from_angle_address(self):
        reply, _ = build_reply(original_message(), ReplyRequest("m1", body_text="x"))
        self.assertEqual(reply.to, "alice@example.com")

    def test_recipient_falls_back_to_raw_from(self):
        reply, _ = build_reply(original_message(From="alice@example.com"), ReplyRequest("m1", body_text="x"))
        self.assertEqual(reply.to, "alice@example.com")

    def test_missing_message_id(self):
        with self.assertRaises(MissingMessageIdError):
            build_reply(original_message(Message_ID=None), ReplyRequest("m1", body_text="x"))

    def test_quote_text(self):
        self.assertEqual(quote_text("a\nb"), "> a\n> b")

    def test_plain_quote(self):
        reply, _ = build_reply(original_message(), ReplyRequest("m1", body_text="thanks", quote=True))
        self.assertEqual(
            reply.body_text,
            "thanks\n\nOn Mon, 1 Jan 2024 10:00:00 +0000, Alice Example <alice@example.com> wrote:\n> a\n> b",
        )
        self.assertIsNone(reply.body_html)

    def test_html_quote(self):
        reply, _ = build_reply(original_message(), ReplyRequest("m1", body_html="<p>thanks</p>", quote=True))
        self.assertEqual(reply.body_html, "<p>thanks</p><br><br><blockquote><p>orig</p></blockquote>")
        self.assertIsNone(reply.body_text)

    def test_quote_skipped_when_original_lacks_type(self):
        original = original_message()
        original["payload"]["parts"] = [text_part("text/html", "<p>only html</p>")]
        reply, _ = build_reply(original, ReplyRequest("m1", body_text="thanks", quote=True))
        self.assertEqual(reply.body_text, "thanks")

    def test_no_quote_by_default(self):
        reply, _ = build_reply(original_message(), ReplyRequest("m1", body_text="thanks"))
        self.assertEqual(reply.body_text, "thanks")


class ReplyToEmailTests(unittest.TestCase):
    def setUp(self):
        self.client = FakeGmailClient(messages={"m1": original_message()})

    def test_reply_sent_in_original_thread(self):
        result = reply_to_email(self.client, ReplyRequest("m1", body_text="thanks"))
        self.assertIn(("get_message", "m1", "full"), self.client.calls)
        encoded, thread_id = self.client.sent_messages[0]
        self.assertEqual(thread_id, "t1")
        self.assertEqual(result["threadId"], "t1")
        msg = parse_raw(encoded)
        self.assertEqual(msg["Subject"], "Re: Report")
        self.assertEqual(msg["To"], "alice@example.com")
        self.assertEqual(msg["In-Reply-To"], "<abc@x>")
        self.assertEqual(msg["References"], "<abc@x>")

    def test_reply_draft(self):
        result = reply_to_email(self.client, ReplyRequest("m1", body_text="thanks", draft=True))
        self.assertEqual(self.client.created_drafts[0][1], "t1")
        self.assertEqual(result["gmailUrl"], DRAFT_URL_PREFIX + "DRAFT_1")
        self.assertEqual(self.client.sent_messages, [])

    def test_missing_message_id_sends_nothing(self):
        self.client.messages["m2"] = original_message(Message_ID=None)
        with self.assertRaises(MissingMessageIdError):
            reply_to_email(self.client, ReplyRequest("m2", body_text="thanks"))
        self.assertEqual(self.client.sent_messages, [])


if __name__ == "__main__":
    unittest.main()

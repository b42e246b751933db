"""ID-token decoding and client-id checks."""
import base64
import json
import unittest

from mirror_core.identity import AuthenticatedIdentity, IdentityError, decode_id_token, is_placeholder_client_id


def make_token(claims):
    def segment(data):
        raw = json.dumps(data).encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    return ".".join([segment({"alg": "RS256"}), segment(claims), "signature"])


class IdentityTests(unittest.TestCase):
    def test_decodes_profile_claims(self):
        identity = decode_id_token(make_token({
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "picture": "https://example.com/ada.png",
        }))
        self.assertEqual(identity, AuthenticatedIdentity("Ada Lovelace", "ada@example.com", "https://example.com/ada.png"))
        self.assertEqual(identity.initials, "AL")

    def test_name_falls_back_to_email(self):
        identity = decode_id_token(make_token({"email": "grace@example.com"}))
        self.assertEqual(identity.display_name, "grace@example.com")
        self.assertEqual(identity.avatar_url, "")
        self.assertEqual(identity.initials, "G")

    def test_whitespace_around_token_is_ignored(self):
        identity = decode_id_token("  " + make_token({"email": "x@example.com"}) + "\n")
        self.assertEqual(identity.email, "x@example.com")

    def test_rejects_malformed_tokens(self):
        for credential in ("", "not-a-jwt", "a..c", "a.@@@.c", None):
            with self.assertRaises(IdentityError):
                decode_id_token(credential)

    def test_rejects_non_object_payload(self):
        payload = base64.urlsafe_b64encode(b"[1, 2]").rstrip(b"=").decode("ascii")
        with self.assertRaises(IdentityError):
            decode_id_token(f"h.{payload}.s")

    def test_rejects_missing_email(self):
        with self.assertRaises(IdentityError):
            decode_id_token(make_token({"name": "No Mail"}))

    def test_placeholder_client_id(self):
        self.assertTrue(is_placeholder_client_id("YOUR_GOOGLE_CLIENT_ID.apps.googleusercontent.com"))
        self.assertTrue(is_placeholder_client_id(""))
        self.assertTrue(is_placeholder_client_id(None))
        self.assertFalse(is_placeholder_client_id("12345-abc.apps.googleusercontent.com"))


if __name__ == "__main__":
    unittest.main()

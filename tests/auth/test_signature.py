"""Ed25519 challenge signature verification."""

from mwb.auth.signature import decode_base64url, verify_challenge_signature


class TestVerifySignature:
    def test_valid_signature(self, keypair):
        assert verify_challenge_signature(keypair.public_key, "code-123", keypair.sign("code-123"))

    def test_signature_over_other_message(self, keypair):
        assert not verify_challenge_signature(keypair.public_key, "code-123", keypair.sign("code-456"))

    def test_signature_from_other_key(self, keypair, make_keypair):
        assert not verify_challenge_signature(keypair.public_key, "code", make_keypair().sign("code"))

    def test_malformed_inputs_return_false(self, keypair):
        assert not verify_challenge_signature("***", "code", keypair.sign("code"))
        assert not verify_challenge_signature(keypair.public_key, "code", "not base64 !")
        assert not verify_challenge_signature(keypair.public_key[:-4], "code", keypair.sign("code"))
        assert not verify_challenge_signature(keypair.public_key, "code", keypair.sign("code")[:-8])


def test_decode_base64url_accepts_missing_padding():
    assert decode_base64url("aGk") == b"hi"
    assert decode_base64url("aGk=") == b"hi"

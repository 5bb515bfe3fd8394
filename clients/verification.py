import json

import jwt
from jwt.exceptions import PyJWTError


class VerificationError(BaseException):
    """
    There was an error with verifying the signature
    """

    pass


class VerificationFormatError(VerificationError):
    """
    There was an error with the format of the signature (not if it is valid)
    """

    pass


class JwsVerifier:
    """
    Verifies compact JWS client assertions against a client's stored JWK.

    Only asymmetric key families are accepted; a shared-secret ("oct") key
    would let anyone holding the stored JWK forge assertions.
    """

    ALGORITHMS: dict[str, list[str]] = {
        "RSA": ["RS256", "RS384", "RS512", "PS256", "PS384", "PS512"],
        "EC": ["ES256", "ES384", "ES512"],
        "OKP": ["EdDSA"],
    }

    @classmethod
    def load_key(cls, jwk: dict | str) -> jwt.PyJWK:
        """
        Parses a JWK (as a dict or JSON text) into a usable key.
        """
        if isinstance(jwk, str):
            try:
                jwk = json.loads(jwk)
            except json.JSONDecodeError:
                raise VerificationFormatError("Stored key is not valid JSON")
        if not isinstance(jwk, dict):
            raise VerificationFormatError("Stored key is not a JSON object")
        if jwk.get("kty") not in cls.ALGORITHMS:
            raise VerificationFormatError(f"Unsupported key type {jwk.get('kty')!r}")
        try:
            return jwt.PyJWK(jwk)
        except PyJWTError as e:
            raise VerificationFormatError(f"Unusable key: {e}")

    @classmethod
    def verify(cls, assertion: str, jwk: dict | str, key_id: str) -> dict:
        """
        Verifies the assertion was signed by the given key, and that it says
        so in its header. Returns the verified payload.
        """
        key = cls.load_key(jwk)
        try:
            header = jwt.get_unverified_header(assertion)
        except PyJWTError:
            raise VerificationFormatError("Assertion is not a compact JWS")
        if header.get("kid") != key_id:
            raise VerificationError("Assertion key id does not match client")
        algorithm = header.get("alg")
        if algorithm not in cls.ALGORITHMS[key.key_type]:
            raise VerificationError(
                f"Algorithm {algorithm!r} not allowed for {key.key_type} keys"
            )
        try:
            return jwt.decode(
                assertion,
                key.key,
                algorithms=[algorithm],
                options={"verify_aud": False},
            )
        except PyJWTError as e:
            raise VerificationError(f"Signature verification failed: {e}")

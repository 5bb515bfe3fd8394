import secrets

import jwt


class SigningKey:
    """
    The symmetric key continuation and access tokens are signed with.

    It lives exactly as long as the process: one is generated at startup by
    the service container and handed to whatever needs to sign or verify.
    Restarting the process invalidates every outstanding token.
    """

    algorithm = "HS256"

    def __init__(self, secret: bytes):
        if len(secret) < 32:
            raise ValueError("Signing secrets must be at least 32 bytes")
        self._secret = secret

    def __repr__(self):
        return f"<SigningKey {self.algorithm}>"

    @classmethod
    def generate(cls) -> "SigningKey":
        return cls(secrets.token_bytes(64))

    def sign(self, payload: dict) -> str:
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str, **kwargs) -> dict:
        """
        Verifies the token's signature (and whatever claims kwargs asks
        jwt.decode to check), returning its payload. Raises PyJWTError.
        """
        return jwt.decode(token, self._secret, algorithms=[self.algorithm], **kwargs)

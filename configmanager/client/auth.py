"""
Connection string parsing and HMAC-SHA256 request signing.
"""

import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass
from email.utils import formatdate
from typing import Generator

import httpx

from configmanager.common.exceptions import ConnectionStringError

SIGNED_HEADERS = "x-ms-date;host;x-ms-content-sha256"


@dataclass(frozen=True)
class Credentials:
    endpoint: str
    credential_id: str
    secret: str


def parse_connection_string(connection_string: str) -> Credentials:
    """
    Parse "Endpoint=https://...;Id=...;Secret=..." into Credentials.

    Secret values may themselves contain '=' (base64 padding).
    """
    parts: dict[str, str] = {}
    for segment in connection_string.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        name, sep, value = segment.partition("=")
        if not sep:
            raise ConnectionStringError(f"malformed segment '{segment}'")
        parts[name.strip().lower()] = value.strip()

    missing = [name for name in ("endpoint", "id", "secret") if not parts.get(name)]
    if missing:
        raise ConnectionStringError(f"missing {', '.join(missing)}")

    return Credentials(
        endpoint=parts["endpoint"].rstrip("/"),
        credential_id=parts["id"],
        secret=parts["secret"],
    )


class HmacCredentialAuth(httpx.Auth):
    """Signs each request with the access key secret."""

    requires_request_body = True

    def __init__(self, credential_id: str, secret: str):
        self.credential_id = credential_id
        try:
            self._key = base64.b64decode(secret, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ConnectionStringError(f"secret is not valid base64: {e}") from e

    def sign(self, method: str, path_and_query: str, date: str, host: str, content_hash: str) -> str:
        string_to_sign = f"{method}\n{path_and_query}\n{date};{host};{content_hash}"
        digest = hmac.new(self._key, string_to_sign.encode("utf-8"), hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        date = formatdate(usegmt=True)
        content_hash = base64.b64encode(hashlib.sha256(request.content).digest()).decode("ascii")
        host = request.url.netloc.decode("ascii")
        path_and_query = request.url.raw_path.decode("ascii")

        signature = self.sign(request.method, path_and_query, date, host, content_hash)

        request.headers["x-ms-date"] = date
        request.headers["x-ms-content-sha256"] = content_hash
        request.headers["Authorization"] = (
            f"HMAC-SHA256 Credential={self.credential_id}"
            f"&SignedHeaders={SIGNED_HEADERS}&Signature={signature}"
        )
        yield request

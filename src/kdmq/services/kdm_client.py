"""HTTP fetching and parsing of KDM documents.

One KDMClient owns one requests.Session with a fixed retry policy and is
passed to the resolver. Nothing is cached: every call is a fresh GET.
"""

import json
import logging
from pathlib import Path

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from kdmq.errors import FetchError, NotFoundError, ParseError
from kdmq.models.kdm import KDMData

logger = logging.getLogger(__name__)

# Fixed retry policy, not user-configurable.
RETRY_TOTAL = 4
RETRY_BACKOFF_FACTOR = 1
RETRY_BACKOFF_MAX = 30
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)
# (connect, read) seconds per attempt
REQUEST_TIMEOUT = (10, 60)


def build_retry() -> Retry:
    return Retry(
        total=RETRY_TOTAL,
        connect=RETRY_TOTAL,
        read=RETRY_TOTAL,
        status=RETRY_TOTAL,
        backoff_factor=RETRY_BACKOFF_FACTOR,
        backoff_max=RETRY_BACKOFF_MAX,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )


def build_session() -> requests.Session:
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=build_retry())
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class KDMClient:
    """Fetch KDM documents over HTTP(S) with bounded retries."""

    def __init__(self, session: requests.Session | None = None):
        self.session = session or build_session()

    def fetch(self, url: str) -> KDMData:
        """GET url and parse the body as a KDM document.

        Connection failures, exhausted retries and any status >= 400 raise
        FetchError; a body that is not a KDM document raises ParseError.
        """
        logger.debug("Fetching KDM data from %s", url)
        try:
            response = self.session.get(url, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise FetchError(f"error during HTTP get to [{url}], error: {e}") from e

        if response.status_code >= 400:
            raise FetchError(
                f"error during HTTP get to [{url}], status: {response.status_code} {response.reason}"
            )
        return parse_kdm_data(response.content, source=url)

    def close(self) -> None:
        self.session.close()


def parse_kdm_data(payload: bytes | str, source: str) -> KDMData:
    try:
        raw = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"error translating data from [{source}] to KDM data, error: {e}") from e
    if not isinstance(raw, dict):
        raise ParseError(f"error translating data from [{source}] to KDM data, error: not a JSON object")
    try:
        return KDMData.model_validate(raw)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ParseError(f"error translating data from [{source}] to KDM data, error: {errors}") from e


def load_kdm_file(path: Path) -> KDMData:
    """Read a local KDM data file; parsed the same way as a fetched body."""
    if not path.is_file():
        raise NotFoundError(f"Local data file [{path}] does not exist")
    try:
        payload = path.read_bytes()
    except OSError as e:
        raise NotFoundError(f"Error while trying to read file [{path}], error: {e}") from e
    return parse_kdm_data(payload, source=str(path))
